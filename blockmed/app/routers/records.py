"""Patient record endpoints."""
from fastapi import APIRouter, Depends, status

from ..deps import get_controller, outcome_response
from ..domain.schemas import OutcomeOut, RecordIn
from ..services.controller import RecordSessionController

router = APIRouter()


@router.get("/{patient_id}", response_model=OutcomeOut)
def fetch_records(
    patient_id: str,
    controller: RecordSessionController = Depends(get_controller),
):
    # raw text on purpose: the controller owns patient ID validation
    return outcome_response(controller.fetch_records(patient_id))


@router.post("", response_model=OutcomeOut, status_code=status.HTTP_201_CREATED)
def add_record(
    payload: RecordIn,
    controller: RecordSessionController = Depends(get_controller),
):
    outcome = controller.add_record(
        payload.patient_id,
        name=payload.name,
        diagnosis=payload.diagnosis,
        treatment=payload.treatment,
    )
    return outcome_response(outcome)
