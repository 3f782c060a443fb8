"""
bbx/deployments.py - Deployment bookkeeping.

Keeps one record per deployed contract name. Networks with save_deployments
persist records to deployments/<network>/<Name>.json (plus a .chainId file) so
later runs and `bbx verify` can find them; other networks keep them in memory.

A deploy() call whose artifact bytecode and args match the existing record
reuses it instead of deploying again.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from web3 import Web3

from bbx.artifacts import ArtifactStore, coerce_args
from bbx.chain import NamedAccount, send_transaction
from bbx.config import NetworkConfig

logger = logging.getLogger(__name__)


class DeploymentNotFoundError(KeyError):
    """Raised when no deployment is recorded under a name."""


@dataclass
class Deployment:
    name: str
    address: str
    abi: list[dict[str, Any]]
    args: list[Any] = field(default_factory=list)
    transaction_hash: str = ""
    block_number: int | None = None
    gas_used: int | None = None
    bytecode_hash: str = ""
    deployer: str = ""
    reused: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data.pop("reused")
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Deployment":
        return cls(
            name=data["name"],
            address=data["address"],
            abi=data.get("abi", []),
            args=data.get("args", []),
            transaction_hash=data.get("transaction_hash", ""),
            block_number=data.get("block_number"),
            gas_used=data.get("gas_used"),
            bytecode_hash=data.get("bytecode_hash", ""),
            deployer=data.get("deployer", ""),
        )


def _jsonable(value: Any) -> Any:
    """Args as stored on disk: bytes become 0x hex, sequences recurse."""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


class DeploymentsManager:
    """Deploys contracts from artifacts and remembers where they went."""

    def __init__(
        self,
        w3: Web3,
        network: NetworkConfig,
        artifacts: ArtifactStore,
        deployments_dir: Path,
    ):
        self.w3 = w3
        self.network = network
        self.artifacts = artifacts
        self.directory = Path(deployments_dir) / network.name
        self._records: dict[str, Deployment] = {}
        if network.save_deployments:
            self._load_saved()

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def _load_saved(self) -> None:
        if not self.directory.is_dir():
            return
        for path in sorted(self.directory.glob("*.json")):
            try:
                record = Deployment.from_dict(json.loads(path.read_text()))
            except (json.JSONDecodeError, KeyError) as e:
                logger.warning(f"Skipping bad deployment record {path}: {e}")
                continue
            self._records[record.name] = record

    def save(self, deployment: Deployment) -> None:
        self._records[deployment.name] = deployment
        if not self.network.save_deployments:
            return
        self.directory.mkdir(parents=True, exist_ok=True)
        (self.directory / ".chainId").write_text(str(self.w3.eth.chain_id))
        path = self.directory / f"{deployment.name}.json"
        path.write_text(json.dumps(deployment.to_dict(), indent=2))

    def get(self, name: str) -> Deployment:
        try:
            return self._records[name]
        except KeyError:
            raise DeploymentNotFoundError(
                f"No deployment found for {name!r} on {self.network.name}"
            ) from None

    def get_or_none(self, name: str) -> Deployment | None:
        return self._records.get(name)

    def all(self) -> dict[str, Deployment]:
        return dict(self._records)

    def clear(self) -> None:
        """Forget every record (in memory and on disk)."""
        self._records.clear()
        if self.directory.is_dir():
            for path in self.directory.glob("*.json"):
                path.unlink()

    def get_contract(self, name: str, address: str | None = None):
        """web3 Contract bound to a recorded deployment (or explicit address)."""
        if address is None:
            deployment = self.get(name)
            abi = deployment.abi
            address = deployment.address
        else:
            abi = self.artifacts.get(name).abi
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    # ------------------------------------------------------------------
    # Deploying
    # ------------------------------------------------------------------

    def deploy(
        self,
        name: str,
        from_: NamedAccount,
        args: list[Any] | None = None,
        log: bool = False,
        contract: str | None = None,
    ) -> Deployment:
        """Deploy artifact `contract` (default: name) and record it as name.

        Args are coerced to the constructor's ABI types before sending.
        """
        artifact = self.artifacts.get(contract or name)
        coerced = coerce_args(artifact.constructor_inputs, list(args or []))
        stored_args = _jsonable(coerced)

        existing = self._records.get(name)
        if (
            existing is not None
            and existing.bytecode_hash == artifact.bytecode_hash
            and existing.args == stored_args
        ):
            if log:
                logger.info(f'reusing "{name}" at {existing.address}')
            existing.reused = True
            return existing

        factory = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
        receipt = send_transaction(
            self.w3, factory.constructor(*coerced), from_, artifact.contract_name, "deployment"
        )

        deployment = Deployment(
            name=name,
            address=receipt["contractAddress"],
            abi=artifact.abi,
            args=stored_args,
            transaction_hash=Web3.to_hex(receipt["transactionHash"]),
            block_number=receipt["blockNumber"],
            gas_used=receipt["gasUsed"],
            bytecode_hash=artifact.bytecode_hash,
            deployer=from_.address,
        )
        self.save(deployment)

        if log:
            logger.info(
                f'deploying "{name}" (tx: {deployment.transaction_hash})...: '
                f"deployed at {deployment.address} with {deployment.gas_used} gas"
            )
        return deployment
