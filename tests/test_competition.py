"""Tests for bbx.competition - contract call helpers, with the chain mocked."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from bbx import competition
from bbx.chain import NamedAccount
from bbx.competition import (
    Battle,
    add_beatboxers,
    create_competition,
    event_args,
    fulfill_random_words,
    random_words_requests,
    start_battle,
)
from bbx.participants import generate_random_beatboxers

CREATOR = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
BEATBOXER_ONE = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
BEATBOXER_TWO = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"
COMPETITION = "0x9A676e781A523b5d0C0e43731313A708CB607508"

COMPETITION_CREATED_ABI = {
    "type": "event",
    "name": "CompetitionCreated",
    "inputs": [
        {"name": "id", "type": "uint256", "indexed": True},
        {"name": "name", "type": "string", "indexed": False},
        {"name": "creator", "type": "address", "indexed": True},
        {"name": "competition", "type": "address", "indexed": False},
        {"name": "description", "type": "string", "indexed": False},
        {"name": "uri", "type": "string", "indexed": False},
    ],
}

FULFILLED_ABI = {
    "type": "event",
    "name": "RandomWordsFulfilled",
    "inputs": [
        {"name": "requestId", "type": "uint256", "indexed": True},
        {"name": "outputSeed", "type": "uint256", "indexed": False},
        {"name": "payment", "type": "uint96", "indexed": False},
        {"name": "success", "type": "bool", "indexed": False},
    ],
}

REQUESTED_ABI = {
    "type": "event",
    "name": "RandomWordsRequested",
    "inputs": [
        {"name": "keyHash", "type": "bytes32", "indexed": True},
        {"name": "requestId", "type": "uint256", "indexed": False},
        {"name": "preSeed", "type": "uint256", "indexed": False},
        {"name": "subId", "type": "uint64", "indexed": True},
    ],
}


def _contract(event_abi, decoded):
    """Fake web3 contract whose event decodes to `decoded` (list of args dicts)."""
    contract = MagicMock()
    contract.abi = [event_abi]
    event = getattr(contract.events, event_abi["name"]).return_value
    event.process_receipt.return_value = [{"args": args} for args in decoded]
    return contract


@pytest.fixture
def env():
    return SimpleNamespace(w3=MagicMock())


@pytest.fixture
def sender():
    return NamedAccount(name="creator", address=CREATOR)


@pytest.fixture
def sent():
    with patch.object(competition, "send_transaction", return_value={"status": 1}) as send:
        yield send


class TestEventArgs:
    def test_abi_order_regardless_of_decoding_order(self):
        # web3 decodes indexed args first; callers get declaration order
        decoded = {
            "id": 0, "creator": CREATOR, "name": "BBU",
            "competition": COMPETITION, "description": "BBU competition", "uri": "ipfs://hash",
        }
        contract = _contract(COMPETITION_CREATED_ABI, [decoded])
        assert event_args(contract, "CompetitionCreated", {}) == [
            [0, "BBU", CREATOR, COMPETITION, "BBU competition", "ipfs://hash"],
        ]

    def test_unknown_event(self):
        contract = _contract(COMPETITION_CREATED_ABI, [])
        with pytest.raises(KeyError, match="BattleCreated"):
            event_args(contract, "BattleCreated", {})


class TestCreateCompetition:
    def test_returns_spawned_address(self, env, sender, sent):
        factory = _contract(COMPETITION_CREATED_ABI, [{
            "id": 0, "name": "BBU", "creator": CREATOR, "competition": COMPETITION,
            "description": "BBU competition", "uri": "ipfs://hash",
        }])
        address, receipt = create_competition(
            env, factory, "BBU", "BBU competition", "ipfs://hash", sender
        )
        assert address == COMPETITION
        assert receipt == {"status": 1}
        factory.functions.createCompetition.assert_called_once_with(
            "BBU", "BBU competition", "ipfs://hash"
        )
        assert sent.call_args.args[2:] == (sender, "CompetitionFactory", "createCompetition")

    def test_no_event(self, env, sender, sent):
        factory = _contract(COMPETITION_CREATED_ABI, [])
        with pytest.raises(LookupError):
            create_competition(env, factory, "BBU", "BBU competition", "ipfs://hash", sender)


class TestCompetitionCalls:
    def test_start_battle_argument_order(self, env, sender, sent):
        contract = MagicMock()
        battle = Battle(
            name="Helium vs. Inertia",
            battle_type=2,
            beatboxer_one=BEATBOXER_ONE.lower(),
            beatboxer_two=BEATBOXER_TWO,
            video_one="dQw4w9WgXcQ",
            video_two="dQw4w9WgXcQ",
            start_time=1_700_000_000,
            end_time=1_700_086_400,
            winning_amount=10**17,
        )
        start_battle(env, contract, battle, sender)
        contract.functions.startBattle.assert_called_once_with(
            "Helium vs. Inertia", 2, BEATBOXER_ONE, BEATBOXER_TWO,
            "dQw4w9WgXcQ", "dQw4w9WgXcQ", 1_700_000_000, 1_700_086_400, 10**17,
        )
        assert sent.call_args.args[3:] == ("BbxCompetition", "startBattle")

    def test_add_beatboxers_passes_parallel_lists(self, env, sender, sent):
        contract = MagicMock()
        participants = generate_random_beatboxers()
        add_beatboxers(env, contract, participants, sender)
        addresses, names = contract.functions.addBeatboxers.call_args.args
        assert addresses == participants.addresses
        assert names == participants.names
        assert len(addresses) == 16

    @pytest.mark.parametrize("helper,method", [
        ("start_wildcard", "startWildcard"),
        ("end_wildcard", "endWildcard"),
    ])
    def test_wildcard_round(self, env, sender, sent, helper, method):
        contract = MagicMock()
        getattr(competition, helper)(env, contract, sender)
        getattr(contract.functions, method).assert_called_once_with()

    def test_add_judge_and_beatboxer(self, env, sender, sent):
        contract = MagicMock()
        competition.add_judge(env, contract, BEATBOXER_ONE.lower(), sender)
        competition.add_beatboxer(env, contract, BEATBOXER_TWO, "Beatboxer Two", sender)
        contract.functions.addJudge.assert_called_once_with(BEATBOXER_ONE)
        contract.functions.addBeatboxer.assert_called_once_with(BEATBOXER_TWO, "Beatboxer Two")


class TestRandomness:
    def test_request_ids(self):
        coordinator = _contract(REQUESTED_ABI, [
            {"keyHash": b"\x01" * 32, "requestId": 1, "preSeed": 99, "subId": 1},
        ])
        assert random_words_requests(coordinator, {}) == [1]

    def test_fulfill_reports_callback_success(self, env, sender, sent):
        coordinator = _contract(FULFILLED_ABI, [
            {"requestId": 1, "outputSeed": 5, "payment": 10, "success": True},
        ])
        assert fulfill_random_words(env, coordinator, 1, COMPETITION.lower(), sender) is True
        coordinator.functions.fulfillRandomWords.assert_called_once_with(1, COMPETITION)

    def test_fulfill_callback_failed(self, env, sender, sent):
        coordinator = _contract(FULFILLED_ABI, [
            {"requestId": 1, "outputSeed": 5, "payment": 10, "success": False},
        ])
        assert fulfill_random_words(env, coordinator, 1, COMPETITION, sender) is False

    def test_fulfill_without_event(self, env, sender, sent):
        coordinator = _contract(FULFILLED_ABI, [])
        with pytest.raises(LookupError):
            fulfill_random_words(env, coordinator, 1, COMPETITION, sender)
