# backend/app/api/api_business.py

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import ORJSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import crud, models
from ..database import get_db
from ..schemas.business import BusinessDetail, BusinessSummary, BusinessUpdate
from ..utils.redis_cache import (
    QueryCache,
    business_key,
    business_list_key,
    get_query_cache,
)
from .dependencies import get_current_user

router = APIRouter(tags=["businesses"], default_response_class=ORJSONResponse)
logger = logging.getLogger(__name__)


@router.get("/", response_model=List[BusinessSummary])
def list_businesses(
    *,
    db: Session = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    q: Optional[str] = Query(None, description="Search name and description"),
    category: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> Any:
    """Verified businesses for the marketplace, best rated first."""
    filters = {"q": q, "category": category, "city": city, "page": page, "limit": limit}
    key = business_list_key(filters)
    cached = cache.get(key)
    if cached is not None:
        return cached

    rows = crud.crud_business.list_verified_businesses(db, **filters)
    payload = [BusinessSummary.model_validate(b).model_dump() for b in rows]
    cache.set(key, payload)
    return payload


@router.get("/{business_id}", response_model=BusinessDetail)
def read_business(
    *,
    db: Session = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    business_id: int,
) -> Any:
    key = business_key(business_id)
    cached = cache.get(key)
    if cached is not None:
        return cached

    business = crud.crud_business.get_business(db, business_id, verified_only=True)
    if business is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Business not found")
    payload = BusinessDetail.model_validate(business).model_dump()
    cache.set(key, payload)
    return payload


@router.patch("/{business_id}", response_model=BusinessDetail)
def update_business(
    *,
    db: Session = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    business_id: int,
    business_in: BusinessUpdate,
    current_user: models.Profile = Depends(get_current_user),
) -> Any:
    """Owner edit of a business profile. Clears the cached listings."""
    business = crud.crud_business.get_business(db, business_id)
    if business is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Business not found")
    if business.owner_id != current_user.id and not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    try:
        business = crud.crud_business.update_business(db, business, business_in)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to update business %s: %s", business_id, exc, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update business",
        )

    cache.invalidate(business_key(business_id))
    removed = cache.clear("businesses:*")
    logger.info("Updated business %s; cleared %d cached listings", business_id, removed)
    return business
