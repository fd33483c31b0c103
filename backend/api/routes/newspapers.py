"""
Newspaper catalogue routes.

Reads are public; writes are admin-only.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import AdminUser
from api.schemas.common import success
from api.schemas.newspaper import (
    NewspaperCreate,
    NewspaperResponse,
    NewspaperStats,
    NewspaperUpdate,
)
from api.utils import escape_like
from core.exceptions import BadRequest, NotFound
from infrastructure.database.connection import get_db
from infrastructure.database.models import Newspaper, Subscription
from services.newspaper_query import parse_newspaper_query

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/newspapers", tags=["Newspapers"])

SEARCH_FIELDS = {"id", "name", "publisher", "price", "coverImage", "ratingsAverage"}


def _serialize(newspaper: Newspaper, fields: list[str] | set[str] | None = None) -> dict:
    data = NewspaperResponse.model_validate(newspaper).model_dump(mode="json", by_alias=True)
    if fields:
        keep = set(fields) | {"id"}
        data = {key: value for key, value in data.items() if key in keep}
    return data


async def _get_or_404(db: AsyncSession, newspaper_id: str) -> Newspaper:
    newspaper = await db.get(Newspaper, newspaper_id)
    if not newspaper:
        raise NotFound("No newspaper found with that ID")
    return newspaper


async def _commit_unique_name(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise BadRequest("A newspaper with this name already exists")


@router.get("/search")
async def search_newspapers(
    search: str | None = Query(None, max_length=200),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Case-insensitive search over name and description."""
    if not search or not search.strip():
        raise BadRequest("Please provide a search query")

    pattern = f"%{escape_like(search.strip())}%"
    result = await db.execute(
        select(Newspaper)
        .where(
            Newspaper.is_active.is_(True),
            or_(
                Newspaper.name.ilike(pattern, escape="\\"),
                Newspaper.description.ilike(pattern, escape="\\"),
            ),
        )
        .order_by(Newspaper.ratings_average.desc(), Newspaper.name)
    )
    newspapers = result.scalars().all()
    return success(
        results=len(newspapers),
        newspapers=[_serialize(n, SEARCH_FIELDS) for n in newspapers],
    )


@router.get("/stats")
async def get_newspaper_stats(db: AsyncSession = Depends(get_db)) -> dict:
    """Catalogue-wide rating and monthly price aggregates over active titles."""
    result = await db.execute(
        select(
            func.count(Newspaper.id),
            func.avg(Newspaper.ratings_average),
            func.avg(Newspaper.price_monthly),
            func.min(Newspaper.price_monthly),
            func.max(Newspaper.price_monthly),
        ).where(Newspaper.is_active.is_(True))
    )
    count, avg_rating, avg_price, min_price, max_price = result.one()

    stats = []
    if count:
        stats.append(
            NewspaperStats(
                num_newspapers=count,
                avg_rating=round(float(avg_rating), 2),
                avg_monthly_price=round(float(avg_price), 2),
                min_monthly_price=min_price,
                max_monthly_price=max_price,
            )
        )
    return success(stats=stats)


@router.get("")
async def list_newspapers(request: Request, db: AsyncSession = Depends(get_db)) -> dict:
    """
    List active newspapers.

    Accepts equality filters, ``field[gte|gt|lte|lt]`` ranges, ``sort``,
    ``fields``, ``page`` and ``limit`` query parameters.
    """
    query = parse_newspaper_query(request.query_params.multi_items())
    result = await db.execute(query.apply(select(Newspaper)))
    newspapers = result.scalars().all()
    return success(
        results=len(newspapers),
        newspapers=[_serialize(n, query.fields) for n in newspapers],
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_newspaper(
    body: NewspaperCreate,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> dict:
    newspaper = Newspaper(**body.model_dump(mode="json"))
    db.add(newspaper)
    await _commit_unique_name(db)
    await db.refresh(newspaper)

    logger.info(f"Admin {admin.id} created newspaper {newspaper.id}")
    return success(newspaper=_serialize(newspaper))


@router.get("/{newspaper_id}")
async def get_newspaper(newspaper_id: str, db: AsyncSession = Depends(get_db)) -> dict:
    newspaper = await _get_or_404(db, newspaper_id)
    return success(newspaper=_serialize(newspaper))


@router.patch("/{newspaper_id}")
async def update_newspaper(
    newspaper_id: str,
    body: NewspaperUpdate,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> dict:
    newspaper = await _get_or_404(db, newspaper_id)
    for key, value in body.model_dump(mode="json", exclude_unset=True).items():
        if value is not None:
            setattr(newspaper, key, value)

    await _commit_unique_name(db)
    await db.refresh(newspaper)
    return success(newspaper=_serialize(newspaper))


@router.delete("/{newspaper_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_newspaper(
    newspaper_id: str,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> Response:
    newspaper = await _get_or_404(db, newspaper_id)
    subscribed = await db.scalar(
        select(func.count()).select_from(Subscription).where(Subscription.newspaper_id == newspaper.id)
    )
    if subscribed:
        raise BadRequest(
            "This newspaper has subscriptions and cannot be deleted; set isActive to false instead"
        )
    await db.delete(newspaper)
    await db.commit()

    logger.info(f"Admin {admin.id} deleted newspaper {newspaper_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
