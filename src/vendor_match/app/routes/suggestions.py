"""Smart matching suggestions for a service request.

Scores every active vendor against the request and splits the ranked pool
into recommended suggestions and everyone else.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vendor_match.domain.models import ServiceRequest
from vendor_match.domain.schemas import SuggestionsResponse
from vendor_match.infra.database import get_db
from vendor_match.services.matching import build_suggestions, create_matching_context
from vendor_match.services.score_serializer import serialize_suggestions
from vendor_match.services.scoring_config import get_scoring_config
from vendor_match.services.vendor_metrics_service import load_vendor_pool

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/requests", tags=["suggestions"])


@router.get("/{request_id}/suggestions", response_model=SuggestionsResponse)
async def get_suggestions(request_id: str, db: AsyncSession = Depends(get_db)):
    """Ranked vendor suggestions with per-factor match breakdowns."""
    config = get_scoring_config()

    try:
        result = await db.execute(select(ServiceRequest).where(ServiceRequest.id == request_id))
        service_request = result.scalar_one_or_none()
        if not service_request:
            raise HTTPException(status_code=404, detail="Request not found")

        pool = await load_vendor_pool(db, config)
    except SQLAlchemyError:
        logger.exception("Failed to load vendors for request %s", request_id)
        raise HTTPException(status_code=500, detail="Failed to fetch vendors")

    context = create_matching_context(service_request)
    suggestions = build_suggestions(pool, context, now=datetime.now(timezone.utc), config=config)
    return serialize_suggestions(service_request, suggestions)
