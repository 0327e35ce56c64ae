from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from .. import models, schemas


def get_business(
    db: Session, business_id: int, *, verified_only: bool = False
) -> Optional[models.Business]:
    query = db.query(models.Business).filter(models.Business.id == business_id)
    if verified_only:
        query = query.filter(models.Business.status == "verified")
    return query.first()


def list_verified_businesses(
    db: Session,
    *,
    q: Optional[str] = None,
    category: Optional[str] = None,
    city: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> List[models.Business]:
    query = db.query(models.Business).filter(models.Business.status == "verified")
    if q:
        pattern = f"%{q.strip()}%"
        query = query.filter(
            or_(models.Business.name.ilike(pattern), models.Business.description.ilike(pattern))
        )
    if category:
        query = query.filter(models.Business.category == category)
    if city:
        query = query.filter(models.Business.city.ilike(city.strip()))
    return (
        query.order_by(models.Business.rating_avg.desc(), models.Business.id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )


def update_business(
    db: Session, db_business: models.Business, business_in: schemas.BusinessUpdate
) -> models.Business:
    for key, value in business_in.model_dump(exclude_unset=True).items():
        setattr(db_business, key, value)
    db.add(db_business)
    db.commit()
    db.refresh(db_business)
    return db_business
