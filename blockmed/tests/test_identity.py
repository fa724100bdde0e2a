from unittest.mock import MagicMock, PropertyMock

import pytest
from eth_account import Account as EthAccount
from requests.exceptions import ConnectionError as RequestsConnectionError

from blockmed.app.domain.errors import RemoteUnavailable, UserRejected, WalletUnavailable
from blockmed.app.domain.models import ConnectionState
from blockmed.app.services.identity import (
    IdentityBinder,
    LocalKeySigner,
    LocalKeyWallet,
    NodeSigner,
    NodeWallet,
)

from conftest import OWNER, STRANGER, FakeLedger, FakeWallet

TEST_KEY = "0x" + "11" * 32


def test_binder_marks_owner():
    session = IdentityBinder(FakeWallet(OWNER.lower()), FakeLedger()).connect()

    assert session.state is ConnectionState.CONNECTED
    assert session.is_owner is True
    assert session.signer == f"signer:{OWNER.lower()}"


def test_binder_marks_non_owner():
    session = IdentityBinder(FakeWallet(STRANGER), FakeLedger()).connect()
    assert session.is_owner is False


def test_binder_propagates_owner_lookup_failure():
    ledger = FakeLedger()
    ledger.failures["get_owner"] = RemoteUnavailable("down")

    with pytest.raises(RemoteUnavailable):
        IdentityBinder(FakeWallet(), ledger).connect()


def test_node_wallet_binds_selected_account():
    w3 = MagicMock()
    w3.eth.accounts = [OWNER, STRANGER]

    account, signer = NodeWallet(w3, index=1).request_access()

    assert account == STRANGER
    assert isinstance(signer, NodeSigner)


def test_node_wallet_without_accounts_is_rejection():
    w3 = MagicMock()
    w3.eth.accounts = []
    with pytest.raises(UserRejected):
        NodeWallet(w3).request_access()


def test_node_wallet_unreachable():
    w3 = MagicMock()
    type(w3.eth).accounts = PropertyMock(side_effect=RequestsConnectionError("refused"))
    with pytest.raises(WalletUnavailable):
        NodeWallet(w3).request_access()


def test_local_key_wallet_derives_account():
    w3 = MagicMock()
    w3.is_connected.return_value = True

    account, signer = LocalKeyWallet(w3, TEST_KEY).request_access()

    assert account == EthAccount.from_key(TEST_KEY).address
    assert isinstance(signer, LocalKeySigner)


def test_local_key_wallet_node_down():
    w3 = MagicMock()
    w3.is_connected.return_value = False
    with pytest.raises(WalletUnavailable):
        LocalKeyWallet(w3, TEST_KEY).request_access()


def test_local_key_wallet_bad_key():
    w3 = MagicMock()
    w3.is_connected.return_value = True
    with pytest.raises(WalletUnavailable):
        LocalKeyWallet(w3, "not-a-key").request_access()


def test_node_signer_transacts_from_account():
    call = MagicMock()
    call.transact.return_value = b"\x01" * 32

    tx_hash = NodeSigner(OWNER).submit(MagicMock(), call)

    call.transact.assert_called_once_with({"from": OWNER})
    assert tx_hash == b"\x01" * 32


def test_local_key_signer_signs_and_broadcasts():
    local = EthAccount.from_key(TEST_KEY)
    w3 = MagicMock()
    w3.eth.get_transaction_count.return_value = 3
    w3.eth.chain_id = 1337
    w3.eth.send_raw_transaction.return_value = b"\x02" * 32
    call = MagicMock()
    call.build_transaction.return_value = {
        "to": OWNER,
        "from": local.address,
        "value": 0,
        "gas": 100000,
        "gasPrice": 1,
        "nonce": 3,
        "chainId": 1337,
        "data": "0x",
    }

    tx_hash = LocalKeySigner(local).submit(w3, call)

    params = call.build_transaction.call_args.args[0]
    assert params["nonce"] == 3 and params["chainId"] == 1337
    w3.eth.send_raw_transaction.assert_called_once()
    assert tx_hash == b"\x02" * 32
