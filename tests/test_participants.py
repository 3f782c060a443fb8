"""Tests for bbx.participants - random beatboxers for seeding."""

from web3 import Web3

from bbx.participants import (
    PARTICIPANT_COUNT,
    Participants,
    generate_random_beatboxers,
    random_address,
)


class TestGenerateRandomBeatboxers:
    def test_default_batch_is_sixteen(self):
        participants = generate_random_beatboxers()
        assert PARTICIPANT_COUNT == 16
        assert len(participants) == 16
        assert len(participants.addresses) == len(participants.names) == 16

    def test_sequential_names(self):
        participants = generate_random_beatboxers()
        assert participants.names == [f"Beatboxer {i}" for i in range(16)]

    def test_addresses_are_valid_checksummed(self):
        participants = generate_random_beatboxers()
        for address in participants.addresses:
            assert address.startswith("0x")
            assert len(address) == 42
            assert Web3.is_checksum_address(address)

    def test_batches_differ(self):
        first = generate_random_beatboxers()
        second = generate_random_beatboxers()
        assert first.addresses != second.addresses

    def test_custom_count(self):
        participants = generate_random_beatboxers(4)
        assert participants.names == ["Beatboxer 0", "Beatboxer 1", "Beatboxer 2", "Beatboxer 3"]

    def test_pairs(self):
        participants = Participants(addresses=["0xa", "0xb"], names=["A", "B"])
        assert participants.pairs() == [("0xa", "A"), ("0xb", "B")]


def test_random_address_is_checksummed():
    assert Web3.is_checksum_address(random_address())
