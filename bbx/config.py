"""
bbx/config.py - Project configuration

Networks, named accounts, compiler settings, gas reporting and explorer keys.
Values come from environment variables (a .env file in the working directory is
loaded first) with optional overrides from bbx.toml at the project root.

Example bbx.toml:
    solidity = "0.8.7"
    default_network = "hardhat"

    [paths]
    artifacts = "artifacts"
    deployments = "deployments"

    [networks.sepolia]
    url = "https://rpc.sepolia.org"
    chain_id = 11155111
    explorer = "sepolia"

    [named_accounts]
    deployer = 0
"""

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# ============================================================================
# Constants
# ============================================================================

CONFIG_FILENAME = "bbx.toml"

# Networks with unlocked accounts and a throwaway chain
LOCAL_NETWORKS = ("hardhat", "localhost")

LOCALHOST_URL = "http://127.0.0.1:8545"
SOLIDITY_VERSION = "0.8.7"


class UnknownNetworkError(KeyError):
    """Raised when a network name is not configured."""


class MissingEnvironmentError(RuntimeError):
    """Raised when required environment variables are unset."""

    def __init__(self, missing: list[str], context: str = ""):
        self.missing = list(missing)
        where = f" ({context})" if context else ""
        super().__init__(
            f"Missing required environment variables{where}: {', '.join(self.missing)}"
        )


# ============================================================================
# Data Types
# ============================================================================


@dataclass
class NetworkConfig:
    """One deployment target."""

    name: str
    url: str = ""
    mnemonic: str = ""
    chain_id: int | None = None
    save_deployments: bool = False
    explorer: str | None = None  # key into EtherscanConfig.api_keys

    @property
    def is_local(self) -> bool:
        return self.name in LOCAL_NETWORKS


@dataclass
class GasReporterConfig:
    enabled: bool = False
    currency: str = "USD"


@dataclass
class EtherscanConfig:
    """Explorer API keys, keyed by explorer network name."""

    api_keys: dict[str, str | None] = field(default_factory=dict)

    def api_key(self, explorer: str) -> str | None:
        return self.api_keys.get(explorer)


@dataclass
class ChainlinkConfig:
    """Oracle and VRF settings passed to the CompetitionFactory constructor."""

    token: str | None = None
    oracle: str | None = None
    vrf_coordinator: str | None = None
    job_id: str | None = None
    key_hash: str | None = None


@dataclass
class PathsConfig:
    root: Path = field(default_factory=Path.cwd)
    artifacts: Path | None = None
    deployments: Path | None = None

    def __post_init__(self):
        self.root = Path(self.root)
        self.artifacts = Path(self.artifacts) if self.artifacts else self.root / "artifacts"
        self.deployments = Path(self.deployments) if self.deployments else self.root / "deployments"
        if not self.artifacts.is_absolute():
            self.artifacts = self.root / self.artifacts
        if not self.deployments.is_absolute():
            self.deployments = self.root / self.deployments


@dataclass
class BbxConfig:
    """Top-level configuration."""

    solidity: str = SOLIDITY_VERSION
    default_network: str = "hardhat"
    networks: dict[str, NetworkConfig] = field(default_factory=dict)
    named_accounts: dict[str, int] = field(default_factory=lambda: {"deployer": 0})
    gas_reporter: GasReporterConfig = field(default_factory=GasReporterConfig)
    etherscan: EtherscanConfig = field(default_factory=EtherscanConfig)
    chainlink: ChainlinkConfig = field(default_factory=ChainlinkConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)

    def network(self, name: str | None = None) -> NetworkConfig:
        """Look up a network by name (default network when name is None)."""
        name = name or self.default_network
        try:
            return self.networks[name]
        except KeyError:
            available = ", ".join(sorted(self.networks))
            raise UnknownNetworkError(
                f"Unknown network: {name!r}. Available: {available}"
            ) from None


# ============================================================================
# Parsing
# ============================================================================


def default_networks(env: dict[str, str]) -> dict[str, NetworkConfig]:
    """The built-in network table, filled from environment variables."""
    mnemonic = env.get("MNEMONIC", "")
    return {
        "hardhat": NetworkConfig(name="hardhat"),
        "localhost": NetworkConfig(name="localhost", url=LOCALHOST_URL),
        "rinkeby": NetworkConfig(
            name="rinkeby",
            url=env.get("RINKEBY_RPC_URL", ""),
            mnemonic=mnemonic,
            chain_id=4,
            save_deployments=True,
            explorer="rinkeby",
        ),
        "polygon": NetworkConfig(
            name="polygon",
            url=env.get("POLYGON_RPC_URL", ""),
            mnemonic=mnemonic,
            chain_id=137,
            save_deployments=True,
            explorer="polygon",
        ),
        "mumbai": NetworkConfig(
            name="mumbai",
            url=env.get("MUMBAI_RPC_URL", ""),
            mnemonic=mnemonic,
            chain_id=80001,
            save_deployments=True,
            explorer="polygonMumbai",
        ),
    }


def _parse_network(name: str, data: dict, env: dict[str, str]) -> NetworkConfig:
    """Parse a [networks.<name>] section. Unset fields inherit MNEMONIC."""
    return NetworkConfig(
        name=name,
        url=data.get("url", ""),
        mnemonic=data.get("mnemonic", env.get("MNEMONIC", "")),
        chain_id=data.get("chain_id"),
        save_deployments=data.get("save_deployments", name not in LOCAL_NETWORKS),
        explorer=data.get("explorer"),
    )


def load_config(
    path: Path | None = None,
    env: dict[str, str] | None = None,
    root: Path | None = None,
) -> BbxConfig:
    """
    Build the project configuration.

    Args:
        path: Override bbx.toml path (default: <root>/bbx.toml)
        env: Environment mapping. Defaults to os.environ after loading .env.
        root: Project root (default: current directory)

    Returns:
        BbxConfig. A missing bbx.toml leaves the built-in defaults in place;
        a malformed one is logged and ignored.
    """
    root = Path(root) if root else Path.cwd()
    if env is None:
        load_dotenv(root / ".env")
        env = dict(os.environ)

    config_path = path or root / CONFIG_FILENAME
    raw: dict = {}
    if config_path.exists():
        try:
            with open(config_path, "rb") as f:
                raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            logger.warning(f"Failed to parse {config_path}: {e}")

    networks = default_networks(env)
    for name, data in raw.get("networks", {}).items():
        if isinstance(data, dict):
            networks[name] = _parse_network(name, data, env)

    paths_data = raw.get("paths", {})
    paths = PathsConfig(
        root=root,
        artifacts=paths_data.get("artifacts"),
        deployments=paths_data.get("deployments"),
    )

    named_accounts = {"deployer": 0}
    named_accounts.update(raw.get("named_accounts", {}))

    return BbxConfig(
        solidity=raw.get("solidity", SOLIDITY_VERSION),
        default_network=raw.get("default_network", "hardhat"),
        networks=networks,
        named_accounts=named_accounts,
        gas_reporter=GasReporterConfig(
            enabled="REPORT_GAS" in env,
            currency="USD",
        ),
        etherscan=EtherscanConfig(
            api_keys={
                "rinkeby": env.get("ETHERSCAN_API_KEY"),
                "polygon": env.get("POLYGONSCAN_API_KEY"),
                "polygonMumbai": env.get("POLYGONSCAN_API_KEY"),
                **raw.get("etherscan", {}),
            }
        ),
        chainlink=ChainlinkConfig(
            token=env.get("CHAINLINK_TOKEN"),
            oracle=env.get("CHAINLINK_ORACLE"),
            vrf_coordinator=env.get("CHAINLINK_VRFCOORDINATOR"),
            job_id=env.get("CHAINLINK_JOBID"),
            key_hash=env.get("CHAINLINK_KEYHASH"),
        ),
        paths=paths,
    )
