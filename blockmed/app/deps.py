"""Dependency injection utilities."""
from fastapi import HTTPException, Request, status

from .domain.errors import INTERNAL_ERROR
from .domain.models import Outcome
from .domain.schemas import OutcomeOut
from .services.controller import RecordSessionController
from .services.outcomes import OutcomeLogSink

ERROR_STATUS = {
    "ValidationError": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "NotAuthorized": status.HTTP_403_FORBIDDEN,
    "UserRejected": status.HTTP_403_FORBIDDEN,
    "NotConnected": status.HTTP_409_CONFLICT,
    "WalletUnavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
    "RemoteUnavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
    "RemoteRejected": status.HTTP_502_BAD_GATEWAY,
    INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_controller(request: Request) -> RecordSessionController:
    """Provide the process-wide session controller to endpoints."""
    return request.app.state.controller


def get_outcome_log(request: Request) -> OutcomeLogSink:
    return request.app.state.outcome_log


def outcome_response(outcome: Outcome) -> OutcomeOut:
    if not outcome.ok:
        code = ERROR_STATUS.get(outcome.error or INTERNAL_ERROR, status.HTTP_500_INTERNAL_SERVER_ERROR)
        raise HTTPException(status_code=code, detail=outcome.message)
    return OutcomeOut.from_outcome(outcome)
