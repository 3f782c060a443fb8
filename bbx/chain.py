"""
bbx/chain.py - Network connections, named accounts and transaction sending.

Local networks (hardhat, localhost) sign with node-unlocked accounts. The
in-process "hardhat" network runs on eth-tester + py-evm. Public networks
derive accounts from MNEMONIC and sign client side with eth-account.

Install the in-process chain with: pip install bbx-contracts[local]
"""

import logging
from dataclasses import dataclass

from eth_account import Account
from web3 import Web3

from bbx.config import MissingEnvironmentError, NetworkConfig
from bbx.gas import get_reporter

logger = logging.getLogger(__name__)

DERIVATION_PATH = "m/44'/60'/0'/0/{index}"
RECEIPT_TIMEOUT = 120  # seconds


class TransactionFailedError(RuntimeError):
    """Raised when a mined transaction has status 0."""


@dataclass
class NamedAccount:
    """An account that can send transactions.

    key is None for accounts the node holds unlocked (hardhat, localhost).
    """

    name: str
    address: str
    key: bytes | None = None


def _require_eth_tester():
    """Import and return EthereumTesterProvider, raising a clear error if not installed."""
    try:
        import eth_tester  # noqa: F401
        from web3 import EthereumTesterProvider
        return EthereumTesterProvider
    except ImportError:
        raise ImportError(
            "eth-tester is required for the in-process hardhat network. "
            "Install it with: pip install bbx-contracts[local]"
        )


def connect(network: NetworkConfig) -> Web3:
    """Open a Web3 connection for a configured network."""
    if network.name == "hardhat":
        EthereumTesterProvider = _require_eth_tester()
        return Web3(EthereumTesterProvider())

    if not network.url:
        raise MissingEnvironmentError(
            [f"{network.name.upper()}_RPC_URL"], context=f"network {network.name}"
        )
    w3 = Web3(Web3.HTTPProvider(network.url))
    logger.debug(f"Connected to {network.name} at {network.url}")
    return w3


def derive_account(mnemonic: str, index: int):
    """Derive the BIP-44 account at index from a mnemonic."""
    Account.enable_unaudited_hdwallet_features()
    return Account.from_mnemonic(mnemonic, account_path=DERIVATION_PATH.format(index=index))


def get_signers(w3: Web3, network: NetworkConfig, count: int = 10) -> list[NamedAccount]:
    """All accounts available on the network, in index order."""
    if network.is_local:
        return [
            NamedAccount(name=f"signer-{i}", address=address)
            for i, address in enumerate(w3.eth.accounts)
        ]

    if not network.mnemonic:
        raise MissingEnvironmentError(["MNEMONIC"], context=f"network {network.name}")

    signers = []
    for i in range(count):
        acct = derive_account(network.mnemonic, i)
        signers.append(NamedAccount(name=f"signer-{i}", address=acct.address, key=acct.key))
    return signers


def resolve_named_accounts(
    w3: Web3,
    network: NetworkConfig,
    named_accounts: dict[str, int],
) -> dict[str, NamedAccount]:
    """Map names like "deployer" to accounts by signer index."""
    count = max(named_accounts.values(), default=0) + 1
    signers = get_signers(w3, network, count)
    resolved = {}
    for name, index in named_accounts.items():
        if index >= len(signers):
            raise IndexError(
                f"Named account {name!r} wants signer {index}, "
                f"but {network.name} only has {len(signers)}"
            )
        signer = signers[index]
        resolved[name] = NamedAccount(name=name, address=signer.address, key=signer.key)
    return resolved


def send_transaction(
    w3: Web3,
    call,
    account: NamedAccount,
    contract_name: str,
    method: str,
    value: int = 0,
):
    """Send a contract call or constructor from account and wait for the receipt.

    Args:
        call: A web3 ContractFunction or ContractConstructor with bound args.
        account: Sender. Unlocked accounts go through eth_sendTransaction,
            keyed accounts are signed locally.
        contract_name, method: Labels for the gas report.
        value: Wei to attach.

    Returns:
        The transaction receipt.

    Raises:
        TransactionFailedError: the transaction was mined but reverted.
    """
    params = {"from": account.address}
    if value:
        params["value"] = value

    if account.key is None:
        tx_hash = call.transact(params)
    else:
        params["nonce"] = w3.eth.get_transaction_count(account.address, "pending")
        params["chainId"] = w3.eth.chain_id
        # Explicit gasPrice keeps web3 from reading PoA block headers for fee data
        params["gasPrice"] = w3.eth.gas_price
        tx = call.build_transaction(params)
        signed = w3.eth.account.sign_transaction(tx, account.key)
        tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)

    logger.debug(f"{contract_name}.{method} tx sent: {Web3.to_hex(tx_hash)}")
    receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=RECEIPT_TIMEOUT)
    if receipt["status"] != 1:
        raise TransactionFailedError(f"{contract_name}.{method} reverted: {Web3.to_hex(tx_hash)}")

    get_reporter().record(contract_name, method, receipt["gasUsed"])
    return receipt
