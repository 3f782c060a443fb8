"""
bbx/verify.py - Source verification on Etherscan-family block explorers.

Submits the solc standard-JSON input from the artifact's build info together
with the ABI-encoded constructor arguments, then polls until the explorer
reports a result. A contract that is already verified counts as success.
"""

import json
import logging
import time
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Any

from bbx.artifacts import encode_constructor_args

logger = logging.getLogger(__name__)

POLL_INTERVAL = 3  # seconds between checkverifystatus calls
MAX_POLLS = 20
HTTP_TIMEOUT = 30


class VerificationError(RuntimeError):
    """Raised when the explorer rejects or fails a verification."""


@dataclass
class Explorer:
    api_url: str
    browser_url: str


# Keyed by the explorer names used in EtherscanConfig.api_keys
EXPLORERS = {
    "rinkeby": Explorer(
        api_url="https://api-rinkeby.etherscan.io/api",
        browser_url="https://rinkeby.etherscan.io",
    ),
    "polygon": Explorer(
        api_url="https://api.polygonscan.com/api",
        browser_url="https://polygonscan.com",
    ),
    "polygonMumbai": Explorer(
        api_url="https://api-testnet.polygonscan.com/api",
        browser_url="https://mumbai.polygonscan.com",
    ),
}


# ============================================================================
# HTTP
# ============================================================================


def _request(
    url: str,
    params: dict[str, str] | None = None,
    form: dict[str, str] | None = None,
) -> dict[str, Any]:
    """GET url with query params, or POST form as application/x-www-form-urlencoded."""
    if form is None:
        req = urllib.request.Request(f"{url}?{urllib.parse.urlencode(params or {})}")
    else:
        req = urllib.request.Request(
            url,
            data=urllib.parse.urlencode(form).encode(),
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            method="POST",
        )
    try:
        with urllib.request.urlopen(req, timeout=HTTP_TIMEOUT) as resp:
            return json.loads(resp.read())
    except urllib.error.URLError as e:
        raise VerificationError(f"Cannot reach explorer at {url}: {e}") from e


# ============================================================================
# Public API
# ============================================================================


def get_explorer(env) -> tuple[Explorer, str]:
    """Explorer endpoints and API key for the environment's network."""
    explorer_name = env.network.explorer
    if explorer_name is None or explorer_name not in EXPLORERS:
        raise VerificationError(f"No block explorer configured for {env.network.name}")
    api_key = env.config.etherscan.api_key(explorer_name)
    if not api_key:
        raise VerificationError(f"No explorer API key set for {explorer_name}")
    return EXPLORERS[explorer_name], api_key


def is_verified(explorer: Explorer, api_key: str, address: str) -> bool:
    data = _request(explorer.api_url, {
        "module": "contract",
        "action": "getsourcecode",
        "address": address,
        "apikey": api_key,
    })
    result = data.get("result")
    if data.get("status") != "1" or not isinstance(result, list) or not result:
        return False
    return bool(result[0].get("SourceCode"))


def verify_contract(
    env,
    name: str,
    address: str,
    constructor_arguments: list[Any],
) -> str:
    """Verify a deployed contract's source on the network's explorer.

    Args:
        env: DeployEnvironment for the target network.
        name: Artifact (contract) name.
        address: Deployed address.
        constructor_arguments: Same args the contract was deployed with.

    Returns:
        Explorer URL of the verified contract.

    Raises:
        VerificationError: explorer rejected the submission or verification failed
    """
    explorer, api_key = get_explorer(env)
    contract_url = f"{explorer.browser_url}/address/{address}#code"

    if is_verified(explorer, api_key, address):
        logger.info(f"{name} at {address} is already verified: {contract_url}")
        return contract_url

    artifact = env.artifacts.get(name)
    build = env.artifacts.build_info(name)

    form = {
        "apikey": api_key,
        "module": "contract",
        "action": "verifysourcecode",
        "contractaddress": address,
        "sourceCode": json.dumps(build.input),
        "codeformat": "solidity-standard-json-input",
        "contractname": artifact.fully_qualified_name,
        "compilerversion": f"v{build.solc_long_version}",
        # Etherscan's parameter name is misspelled
        "constructorArguements": encode_constructor_args(artifact, constructor_arguments),
    }
    logger.info(f"Submitting {name} at {address} for verification on {explorer.api_url}")
    data = _request(explorer.api_url, form=form)

    if data.get("status") != "1":
        result = str(data.get("result", ""))
        if "already verified" in result.lower():
            logger.info(f"{name} at {address} is already verified: {contract_url}")
            return contract_url
        raise VerificationError(f"Verification submission rejected: {result}")

    guid = data["result"]
    for _ in range(MAX_POLLS):
        time.sleep(POLL_INTERVAL)
        status = _request(explorer.api_url, {
            "module": "contract",
            "action": "checkverifystatus",
            "guid": guid,
            "apikey": api_key,
        })
        result = str(status.get("result", ""))
        if "pending" in result.lower():
            continue
        if status.get("status") == "1" or "already verified" in result.lower():
            logger.info(f"Successfully verified {name} on the explorer: {contract_url}")
            return contract_url
        raise VerificationError(f"Verification failed for {name}: {result}")

    raise VerificationError(f"Verification of {name} still pending after {MAX_POLLS} polls")
