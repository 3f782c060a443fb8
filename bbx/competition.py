"""
bbx/competition.py - Calls into the deployed competition contracts.

CompetitionFactory spawns one BbxCompetition per event. A competition collects
judges and beatboxers, runs a wildcard round, seeds its bracket from VRF
randomness (fulfilled by the coordinator, or by VRFCoordinatorV2Mock locally)
and records timed battles with a prize.

Every transaction goes through bbx.chain.send_transaction, so it shows up in
the gas report.
"""

import logging
from dataclasses import dataclass
from typing import Any

from web3 import Web3

from bbx.chain import NamedAccount, send_transaction
from bbx.participants import Participants

logger = logging.getLogger(__name__)

FACTORY_NAME = "CompetitionFactory"
COMPETITION_NAME = "BbxCompetition"
VRF_MOCK_NAME = "VRFCoordinatorV2Mock"

# CompetitionCreated(id, name, creator, competition, description, uri)
COMPETITION_ADDRESS_INDEX = 3


@dataclass
class Battle:
    """Arguments for BbxCompetition.startBattle, in call order."""

    name: str
    battle_type: int
    beatboxer_one: str
    beatboxer_two: str
    video_one: str
    video_two: str
    start_time: int
    end_time: int
    winning_amount: int

    def as_args(self) -> list[Any]:
        return [
            self.name,
            self.battle_type,
            Web3.to_checksum_address(self.beatboxer_one),
            Web3.to_checksum_address(self.beatboxer_two),
            self.video_one,
            self.video_two,
            self.start_time,
            self.end_time,
            self.winning_amount,
        ]


# ============================================================================
# Events
# ============================================================================


def event_args(contract, event_name: str, receipt) -> list[list[Any]]:
    """Decode every event_name log in receipt emitted by contract.

    Returns each event's arguments as a list in ABI declaration order, so
    callers don't depend on parameter names.
    """
    event_abi = next(
        (e for e in contract.abi if e.get("type") == "event" and e.get("name") == event_name),
        None,
    )
    if event_abi is None:
        raise KeyError(f"{event_name} is not in the contract ABI")

    names = [inp["name"] for inp in event_abi["inputs"]]
    decoded = getattr(contract.events, event_name)().process_receipt(receipt)
    return [[event["args"][name] for name in names] for event in decoded]


# ============================================================================
# Factory
# ============================================================================


def create_competition(
    env,
    factory,
    name: str,
    description: str,
    uri: str,
    sender: NamedAccount,
) -> tuple[str, Any]:
    """Create a competition through the factory.

    Returns:
        (competition address, receipt)
    """
    receipt = send_transaction(
        env.w3,
        factory.functions.createCompetition(name, description, uri),
        sender,
        FACTORY_NAME,
        "createCompetition",
    )
    created = event_args(factory, "CompetitionCreated", receipt)
    if not created:
        raise LookupError("createCompetition emitted no CompetitionCreated event")

    address = created[0][COMPETITION_ADDRESS_INDEX]
    logger.info(f"Competition {name!r} created at {address}")
    return address, receipt


def get_competition(env, address: str):
    """web3 Contract for a BbxCompetition spawned by the factory."""
    abi = env.artifacts.get(COMPETITION_NAME).abi
    return env.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)


# ============================================================================
# Competition
# ============================================================================


def _send(env, competition, method: str, args: list[Any], sender: NamedAccount):
    call = getattr(competition.functions, method)(*args)
    return send_transaction(env.w3, call, sender, COMPETITION_NAME, method)


def add_judge(env, competition, judge: str, sender: NamedAccount):
    return _send(env, competition, "addJudge", [Web3.to_checksum_address(judge)], sender)


def add_beatboxer(env, competition, address: str, name: str, sender: NamedAccount):
    return _send(
        env, competition, "addBeatboxer", [Web3.to_checksum_address(address), name], sender
    )


def add_beatboxers(env, competition, participants: Participants, sender: NamedAccount):
    """Register a whole batch; the contract requests seeding randomness from it."""
    return _send(
        env,
        competition,
        "addBeatboxers",
        [list(participants.addresses), list(participants.names)],
        sender,
    )


def start_wildcard(env, competition, sender: NamedAccount):
    return _send(env, competition, "startWildcard", [], sender)


def end_wildcard(env, competition, sender: NamedAccount):
    return _send(env, competition, "endWildcard", [], sender)


def start_battle(env, competition, battle: Battle, sender: NamedAccount):
    return _send(env, competition, "startBattle", battle.as_args(), sender)


# ============================================================================
# Randomness
# ============================================================================


def random_words_requests(vrf_coordinator, receipt) -> list[int]:
    """Request ids of RandomWordsRequested events in a receipt.

    The request id is the second event argument in the V2 coordinator.
    """
    return [args[1] for args in event_args(vrf_coordinator, "RandomWordsRequested", receipt)]


def fulfill_random_words(
    env,
    vrf_coordinator,
    request_id: int,
    consumer: str,
    sender: NamedAccount,
) -> bool:
    """Have the mock coordinator deliver randomness to consumer.

    Returns:
        Whether the consumer's callback succeeded.
    """
    receipt = send_transaction(
        env.w3,
        vrf_coordinator.functions.fulfillRandomWords(
            request_id, Web3.to_checksum_address(consumer)
        ),
        sender,
        VRF_MOCK_NAME,
        "fulfillRandomWords",
    )
    # RandomWordsFulfilled(requestId, outputSeed, payment, success)
    fulfilled = event_args(vrf_coordinator, "RandomWordsFulfilled", receipt)
    if not fulfilled:
        raise LookupError(f"No RandomWordsFulfilled event for request {request_id}")
    success = bool(fulfilled[0][3])
    logger.info(f"VRF request {request_id} fulfilled for {consumer} (success={success})")
    return success
