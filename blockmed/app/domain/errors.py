"""Error taxonomy for session commands."""
from __future__ import annotations


class BlockMedError(Exception):
    """Base for every failure a command can report."""

    kind = "BlockMedError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(BlockMedError):
    """Input is malformed; never reaches the ledger."""

    kind = "ValidationError"


class NotAuthorized(BlockMedError):
    kind = "NotAuthorized"


class NotConnected(BlockMedError):
    kind = "NotConnected"


class WalletUnavailable(BlockMedError):
    kind = "WalletUnavailable"


class UserRejected(BlockMedError):
    kind = "UserRejected"


class RemoteUnavailable(BlockMedError):
    """The call never reached the ledger (transport, node or signing fault)."""

    kind = "RemoteUnavailable"


class RemoteRejected(BlockMedError):
    """The ledger explicitly refused the state transition."""

    kind = "RemoteRejected"


INTERNAL_ERROR = "InternalError"
