"""
bbx/environment.py - Runtime environment handed to deploy scripts and tests.

One DeployEnvironment bundles the config, the active network, a Web3
connection, named accounts, artifacts and deployment records.
"""

import logging
from dataclasses import dataclass

from web3 import Web3

from bbx import gas, registry
from bbx.artifacts import ArtifactStore
from bbx.chain import NamedAccount, connect, get_signers, resolve_named_accounts
from bbx.config import BbxConfig, NetworkConfig, load_config
from bbx.deployments import DeploymentsManager

logger = logging.getLogger(__name__)


@dataclass
class DeployEnvironment:
    config: BbxConfig
    network: NetworkConfig
    w3: Web3
    named_accounts: dict[str, NamedAccount]
    artifacts: ArtifactStore
    deployments: DeploymentsManager

    @property
    def deployer(self) -> NamedAccount:
        return self.named_accounts["deployer"]

    def signers(self) -> list[NamedAccount]:
        return get_signers(self.w3, self.network)

    def log(self, *parts) -> None:
        logger.info(" ".join(str(p) for p in parts))

    def run(self, tags: list[str] | None = None) -> None:
        """Run deploy scripts for tags, keeping existing records."""
        for script in registry.resolve(tags):
            if script.should_skip(self):
                logger.debug(f"Skipping deploy script {script.name} on {self.network.name}")
                continue
            logger.debug(f"Running deploy script {script.name}")
            script.func(self)

    def fixture(self, tags: list[str] | None = None) -> None:
        """Deploy tags from a clean slate."""
        self.deployments.clear()
        self.run(tags)


def create_environment(
    network_name: str | None = None,
    config: BbxConfig | None = None,
) -> DeployEnvironment:
    config = config or load_config()
    network = config.network(network_name)
    gas.configure(config.gas_reporter.enabled, config.gas_reporter.currency)

    w3 = connect(network)
    artifacts = ArtifactStore(config.paths.artifacts)
    return DeployEnvironment(
        config=config,
        network=network,
        w3=w3,
        named_accounts=resolve_named_accounts(w3, network, config.named_accounts),
        artifacts=artifacts,
        deployments=DeploymentsManager(w3, network, artifacts, config.paths.deployments),
    )
