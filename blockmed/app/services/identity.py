"""Wallet access and ownership resolution."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Tuple

from eth_account import Account as EthAccount
from eth_account.signers.local import LocalAccount
from requests.exceptions import RequestException
from web3 import Web3
from web3.contract.contract import ContractFunction
from web3.exceptions import Web3Exception

from ..domain.errors import UserRejected, WalletUnavailable
from ..domain.models import Account, ConnectionState, Session
from .gateway import LedgerGateway

logger = logging.getLogger(__name__)


class Signer(ABC):
    """Signing capability handed out by a wallet."""

    address: str

    @abstractmethod
    def submit(self, w3: Web3, call: ContractFunction) -> bytes:
        """Sign and broadcast a contract call, returning the tx hash."""


class LocalKeySigner(Signer):
    def __init__(self, account: LocalAccount) -> None:
        self._account = account
        self.address = account.address

    def submit(self, w3: Web3, call: ContractFunction) -> bytes:
        tx = call.build_transaction(
            {
                "from": self.address,
                "nonce": w3.eth.get_transaction_count(self.address, "pending"),
                "chainId": w3.eth.chain_id,
            }
        )
        signed = self._account.sign_transaction(tx)
        return w3.eth.send_raw_transaction(signed.raw_transaction)


class NodeSigner(Signer):
    """Signs through the node's unlocked account."""

    def __init__(self, address: str) -> None:
        self.address = address

    def submit(self, w3: Web3, call: ContractFunction) -> bytes:
        return call.transact({"from": self.address})


class Wallet(ABC):
    @abstractmethod
    def request_access(self) -> Tuple[Account, Signer]:
        """Return the active account and its signer.

        Raises WalletUnavailable or UserRejected.
        """


class LocalKeyWallet(Wallet):
    def __init__(self, w3: Web3, private_key: str) -> None:
        self.w3 = w3
        self._private_key = private_key

    def request_access(self) -> Tuple[Account, Signer]:
        try:
            reachable = self.w3.is_connected()
        except (Web3Exception, RequestException, ConnectionError) as exc:
            raise WalletUnavailable(str(exc)) from exc
        if not reachable:
            raise WalletUnavailable("Ledger node is not reachable")
        try:
            local = EthAccount.from_key(self._private_key)
        except (ValueError, TypeError) as exc:
            raise WalletUnavailable("Configured private key is invalid") from exc
        return Account(local.address), LocalKeySigner(local)


class NodeWallet(Wallet):
    def __init__(self, w3: Web3, index: int = 0) -> None:
        self.w3 = w3
        self.index = index

    def request_access(self) -> Tuple[Account, Signer]:
        try:
            accounts = list(self.w3.eth.accounts)
        except (Web3Exception, RequestException, ConnectionError) as exc:
            raise WalletUnavailable(str(exc)) from exc
        if not accounts:
            raise UserRejected("No account access was granted")
        if not 0 <= self.index < len(accounts):
            raise UserRejected(f"Account #{self.index} is not available")
        address = accounts[self.index]
        return Account(address), NodeSigner(address)


class IdentityBinder:
    """Binds a session to the wallet's account and resolves ownership."""

    def __init__(self, wallet: Wallet, gateway: LedgerGateway) -> None:
        self.wallet = wallet
        self.gateway = gateway

    def connect(self) -> Session:
        account, signer = self.wallet.request_access()
        logger.info("wallet granted access to %s", account.display)
        owner = self.gateway.get_owner()
        is_owner = account == owner
        logger.info("account %s is_owner=%s", account.display, is_owner)
        return Session(
            state=ConnectionState.CONNECTED,
            account=account,
            is_owner=is_owner,
            signer=signer,
        )
