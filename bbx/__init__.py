"""
bbx - Deployment and integration tooling for the beatbox competition contracts

Deploys CompetitionFactory (and a VRF coordinator mock on local networks),
verifies it on block explorers, and drives the factory and competition
contracts from tests.
"""

__version__ = "0.1.0"

from .config import (
    BbxConfig,
    NetworkConfig,
    MissingEnvironmentError,
    UnknownNetworkError,
    load_config,
)

from .participants import (
    Participants,
    generate_random_beatboxers,
)

__all__ = [
    # Version
    "__version__",
    # Config
    "BbxConfig",
    "NetworkConfig",
    "MissingEnvironmentError",
    "UnknownNetworkError",
    "load_config",
    # Participants
    "Participants",
    "generate_random_beatboxers",
]
