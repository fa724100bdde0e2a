"""Capability checks run before a command touches the ledger."""
from .errors import NotAuthorized, NotConnected
from .models import Session

NOT_CONNECTED = "Wallet is not connected. Connect a wallet first."
NOT_PROVIDER = "You are not authorized to add records. Please contact the contract owner."
NOT_OWNER = "Only contract owner can call this function"


def require_connected(session: Session) -> None:
    if not session.connected or session.account is None:
        raise NotConnected(NOT_CONNECTED)


def require_owner(session: Session) -> None:
    if session.is_owner is not True:
        raise NotAuthorized(NOT_OWNER)


def require_provider(is_authorized: bool) -> None:
    if not is_authorized:
        raise NotAuthorized(NOT_PROVIDER)
