"""
Deploy CompetitionFactory.

Public networks take every constructor argument from the CHAINLINK_* variables
and get verified on the explorer once it has indexed the deployment. Local
networks point the factory at the VRFCoordinatorV2Mock deployed by the
"mocks" script.
"""

import logging
import time

from bbx.config import ChainlinkConfig, MissingEnvironmentError, NetworkConfig
from bbx.registry import register
from bbx.verify import verify_contract

logger = logging.getLogger(__name__)

CONTRACT_NAME = "CompetitionFactory"
MOCK_NAME = "VRFCoordinatorV2Mock"

# Explorers need time to index new contracts before they accept verification
VERIFY_DELAY_SECONDS = 60

# Constructor order: (field on ChainlinkConfig, environment variable)
CONSTRUCTOR_FIELDS = [
    ("token", "CHAINLINK_TOKEN"),
    ("oracle", "CHAINLINK_ORACLE"),
    ("vrf_coordinator", "CHAINLINK_VRFCOORDINATOR"),
    ("job_id", "CHAINLINK_JOBID"),
    ("key_hash", "CHAINLINK_KEYHASH"),
]


def select_constructor_args(
    network: NetworkConfig,
    chainlink: ChainlinkConfig,
    mock_coordinator: str | None = None,
) -> list[str | None]:
    """CompetitionFactory constructor args for a network.

    On local networks the coordinator is mock_coordinator and unset values are
    left as None (deployed as zero values). Elsewhere all five must be set.

    Raises:
        MissingEnvironmentError: a CHAINLINK_* variable is unset on a public network
        ValueError: local network without a mock coordinator address
    """
    if not network.is_local:
        missing = [var for attr, var in CONSTRUCTOR_FIELDS if not getattr(chainlink, attr)]
        if missing:
            raise MissingEnvironmentError(missing, context=f"{CONTRACT_NAME} on {network.name}")
        return [getattr(chainlink, attr) for attr, _ in CONSTRUCTOR_FIELDS]

    if not mock_coordinator:
        raise ValueError(f"{MOCK_NAME} must be deployed before {CONTRACT_NAME} on {network.name}")
    return [
        mock_coordinator if attr == "vrf_coordinator" else getattr(chainlink, attr)
        for attr, _ in CONSTRUCTOR_FIELDS
    ]


def deploy_competition_factory(env) -> None:
    mock_coordinator = None
    if env.network.is_local:
        mock_coordinator = env.deployments.get(MOCK_NAME).address
    args = select_constructor_args(env.network, env.config.chainlink, mock_coordinator)

    competition_factory = env.deployments.deploy(
        CONTRACT_NAME,
        from_=env.deployer,
        args=args,
        log=True,
    )
    env.log(
        f"You have deployed the {CONTRACT_NAME} contract to:",
        competition_factory.address,
    )

    if not env.network.is_local:
        logger.info(f"Waiting {VERIFY_DELAY_SECONDS}s for the explorer to index the contract...")
        time.sleep(VERIFY_DELAY_SECONDS)
        verify_contract(env, CONTRACT_NAME, competition_factory.address, args)


register(
    "competition_factory",
    deploy_competition_factory,
    tags=["all", "factory"],
    dependencies=["mocks"],
)
