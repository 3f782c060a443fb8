"""
bbx/artifacts.py - Compiled contract artifacts.

Reads Hardhat-layout artifacts:
    artifacts/contracts/<Source>.sol/<Name>.json      abi + bytecode
    artifacts/contracts/<Source>.sol/<Name>.dbg.json  pointer to build info
    artifacts/build-info/<hash>.json                  solc standard-JSON input

Also coerces string values (usually from environment variables) into the
Python types web3.py expects for a given ABI input type.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from eth_abi import encode
from web3 import Web3

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
ZERO_BYTES32 = b"\x00" * 32


class ArtifactNotFoundError(FileNotFoundError):
    """Raised when no compiled artifact exists for a contract name."""


# ============================================================================
# Data Types
# ============================================================================


@dataclass
class Artifact:
    contract_name: str
    source_name: str
    abi: list[dict[str, Any]]
    bytecode: str
    deployed_bytecode: str = ""
    path: Path | None = None

    @property
    def constructor_inputs(self) -> list[dict[str, Any]]:
        for entry in self.abi:
            if entry.get("type") == "constructor":
                return entry.get("inputs", [])
        return []

    @property
    def bytecode_hash(self) -> str:
        return Web3.to_hex(Web3.keccak(hexstr=self.bytecode))

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.source_name}:{self.contract_name}"


@dataclass
class BuildInfo:
    solc_version: str
    solc_long_version: str
    input: dict[str, Any] = field(default_factory=dict)


# ============================================================================
# Loading
# ============================================================================


class ArtifactStore:
    """Lazy, cached lookup of artifacts under one artifacts directory."""

    def __init__(self, root: Path):
        self.root = Path(root)
        self._cache: dict[str, Artifact] = {}

    def get(self, name: str) -> Artifact:
        if name not in self._cache:
            self._cache[name] = self._load(name)
        return self._cache[name]

    def exists(self, name: str) -> bool:
        try:
            self.get(name)
        except ArtifactNotFoundError:
            return False
        return True

    def _find(self, name: str) -> Path:
        flat = self.root / f"{name}.json"
        if flat.is_file():
            return flat
        if self.root.is_dir():
            for candidate in sorted(self.root.rglob(f"{name}.json")):
                if "build-info" not in candidate.parts:
                    return candidate
        raise ArtifactNotFoundError(
            f"No artifact for {name!r} under {self.root}. Compile the contracts first."
        )

    def _load(self, name: str) -> Artifact:
        path = self._find(name)
        data = json.loads(path.read_text())

        bytecode = data.get("bytecode", "")
        if isinstance(bytecode, dict):  # solc/foundry style {"object": "..."}
            bytecode = bytecode.get("object", "")
        deployed = data.get("deployedBytecode", "")
        if isinstance(deployed, dict):
            deployed = deployed.get("object", "")
        if bytecode and not bytecode.startswith("0x"):
            bytecode = "0x" + bytecode

        logger.debug(f"Loaded artifact {name} from {path}")
        return Artifact(
            contract_name=data.get("contractName", name),
            source_name=data.get("sourceName", f"contracts/{name}.sol"),
            abi=data["abi"],
            bytecode=bytecode,
            deployed_bytecode=deployed,
            path=path,
        )

    def build_info(self, name: str) -> BuildInfo:
        """Find the solc build info that produced an artifact."""
        artifact = self.get(name)

        candidates: list[Path] = []
        if artifact.path is not None:
            dbg = artifact.path.with_name(f"{artifact.contract_name}.dbg.json")
            if dbg.is_file():
                pointer = json.loads(dbg.read_text()).get("buildInfo")
                if pointer:
                    candidates.append((dbg.parent / pointer).resolve())
        build_dir = self.root / "build-info"
        if build_dir.is_dir():
            candidates.extend(sorted(build_dir.glob("*.json")))

        for path in candidates:
            if not path.is_file():
                continue
            data = json.loads(path.read_text())
            sources = data.get("input", {}).get("sources", {})
            if artifact.source_name in sources:
                return BuildInfo(
                    solc_version=data.get("solcVersion", ""),
                    solc_long_version=data.get("solcLongVersion", data.get("solcVersion", "")),
                    input=data["input"],
                )

        raise ArtifactNotFoundError(f"No build info containing {artifact.source_name}")


# ============================================================================
# Argument handling
# ============================================================================


def abi_type(param: dict[str, Any]) -> str:
    """Canonical type string for an ABI parameter, expanding tuples."""
    type_ = param["type"]
    if type_.startswith("tuple"):
        inner = ",".join(abi_type(c) for c in param.get("components", []))
        return f"({inner}){type_[len('tuple'):]}"
    return type_


def coerce_arg(type_: str, value: Any) -> Any:
    """Convert a (usually string) value into what web3.py expects for type_.

    None becomes the type's zero value.
    """
    if type_ == "address":
        if value is None or value == "":
            return ZERO_ADDRESS
        return Web3.to_checksum_address(value)

    if type_ == "bytes32":
        if value is None or value == "":
            return ZERO_BYTES32
        if isinstance(value, bytes):
            raw = value
        else:
            text = str(value)
            if text.startswith("0x"):
                # Prefixed values are always hex and must fill all 32 bytes
                try:
                    raw = bytes.fromhex(text[2:])
                except ValueError as e:
                    raise ValueError(f"Invalid hex for bytes32: {value!r}") from e
                if len(raw) != 32:
                    raise ValueError(f"Expected 32 bytes for bytes32, got {len(raw)}: {value!r}")
                return raw
            if len(text) == 64:
                try:
                    return bytes.fromhex(text)
                except ValueError:
                    pass
            raw = text.encode("utf-8")
        if len(raw) > 32:
            raise ValueError(f"Value too long for bytes32: {value!r}")
        return raw.ljust(32, b"\x00")

    if type_.startswith(("uint", "int")):
        if value is None or value == "":
            return 0
        if isinstance(value, str):
            return int(value, 0)
        return int(value)

    if type_ == "bool":
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes")
        return bool(value)

    if type_ == "string":
        return "" if value is None else str(value)

    return value


def coerce_args(inputs: list[dict[str, Any]], values: list[Any]) -> list[Any]:
    if len(inputs) != len(values):
        raise ValueError(f"Expected {len(inputs)} arguments, got {len(values)}")
    return [coerce_arg(param["type"], value) for param, value in zip(inputs, values)]


def encode_constructor_args(artifact: Artifact, args: list[Any]) -> str:
    """ABI-encode constructor args as bare hex (no 0x), the form explorers expect."""
    inputs = artifact.constructor_inputs
    if not inputs:
        return ""
    types = [abi_type(param) for param in inputs]
    return encode(types, coerce_args(inputs, args)).hex()
