"""
bbx/participants.py - Random beatboxers for bracket-seeding tests.
"""

import os
from dataclasses import dataclass, field

from web3 import Web3

PARTICIPANT_COUNT = 16
ADDRESS_BYTES = 20


@dataclass
class Participants:
    """Parallel lists, ready for addBeatboxers(addresses, names)."""

    addresses: list[str] = field(default_factory=list)
    names: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.addresses)

    def pairs(self) -> list[tuple[str, str]]:
        return list(zip(self.addresses, self.names))


def random_address() -> str:
    """A random, checksummed 20-byte address. Nobody holds its key."""
    return Web3.to_checksum_address("0x" + os.urandom(ADDRESS_BYTES).hex())


def generate_random_beatboxers(count: int = PARTICIPANT_COUNT) -> Participants:
    """Generate count random addresses named "Beatboxer 0".."Beatboxer <count-1>".

    Collisions are not checked for.
    """
    participants = Participants()
    for i in range(count):
        participants.addresses.append(random_address())
        participants.names.append(f"Beatboxer {i}")
    return participants
