"""GET /v1/snapshot - flattened card list for widgets"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from card_calendar.api.dependencies import get_card_service, get_request_id
from card_calendar.api.v1.schemas import SnapshotItem
from card_calendar.domain.exceptions import StorageError
from card_calendar.services.cards import CardService

router = APIRouter()


@router.get("/snapshot", response_model=List[SnapshotItem])
def get_snapshot(request: Request, service: CardService = Depends(get_card_service)):
    """
    Widget projection of every card.

    Returns:
        One row per card, ordered by ascending payment due date
    """
    try:
        snapshots = service.snapshots()
    except StorageError as e:
        logging.error(f"Card store error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Storage unavailable")

    return [
        SnapshotItem(
            id=s.id,
            name=s.name,
            payment_due_date=s.payment_due_date,
            color_tag=s.color_tag,
            urgency_status=s.urgency_status,
            status_label=s.urgency_status.label,
        )
        for s in snapshots
    ]
