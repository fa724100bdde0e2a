"""Provider authorization endpoints (owner only)."""
from fastapi import APIRouter, Depends

from ..deps import get_controller, outcome_response
from ..domain.schemas import OutcomeOut, ProviderIn
from ..services.controller import RecordSessionController

router = APIRouter()


@router.post("", response_model=OutcomeOut)
def authorize_provider(
    payload: ProviderIn,
    controller: RecordSessionController = Depends(get_controller),
):
    return outcome_response(controller.authorize_provider(payload.address))
