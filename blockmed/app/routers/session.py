"""Wallet session endpoints."""
from fastapi import APIRouter, Depends

from ..deps import get_controller, outcome_response
from ..domain.schemas import OutcomeOut, SessionOut
from ..services.controller import RecordSessionController

router = APIRouter()


@router.get("", response_model=SessionOut)
def get_session(controller: RecordSessionController = Depends(get_controller)):
    return SessionOut.build(controller.session, controller.patient_id, controller.records)


@router.post("/connect", response_model=OutcomeOut)
def connect(controller: RecordSessionController = Depends(get_controller)):
    return outcome_response(controller.connect())
