"""Audit routes."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..deps import get_outcome_log
from ..domain.models import OutcomeLogRead
from ..services.outcomes import OutcomeLogSink

router = APIRouter()


@router.get("/outcomes", response_model=List[OutcomeLogRead])
def outcome_log(
    command: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    log: OutcomeLogSink = Depends(get_outcome_log),
) -> List[OutcomeLogRead]:
    return log.recent(limit=limit, command=command)
