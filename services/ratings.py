"""Rating aggregation.

Ratings are derived from the current review rows on every read; nothing here
is cached or written back to the books table.
"""

from typing import Iterable, NamedTuple

from sqlalchemy import func
from sqlalchemy.orm import Session

import models

RATING_VALUES = (1, 2, 3, 4, 5)


class RatingSummary(NamedTuple):
    count: int
    average: float


EMPTY_SUMMARY = RatingSummary(count=0, average=0.0)


def aggregate(db: Session, book_id: int) -> RatingSummary:
    count, total = (
        db.query(func.count(models.Review.id), func.sum(models.Review.rating))
        .filter(models.Review.book_id == book_id)
        .one()
    )
    if not count:
        return EMPTY_SUMMARY
    return RatingSummary(count=count, average=float(total) / count)


def aggregate_many(db: Session, book_ids: Iterable[int]) -> dict[int, RatingSummary]:
    """Aggregate several books in one grouped query.

    Books without reviews are present in the result with ``EMPTY_SUMMARY``.
    """
    ids = list(dict.fromkeys(book_ids))
    if not ids:
        return {}

    rows = (
        db.query(
            models.Review.book_id,
            func.count(models.Review.id),
            func.sum(models.Review.rating),
        )
        .filter(models.Review.book_id.in_(ids))
        .group_by(models.Review.book_id)
        .all()
    )
    summaries = {book_id: EMPTY_SUMMARY for book_id in ids}
    for book_id, count, total in rows:
        summaries[book_id] = RatingSummary(count=count, average=float(total) / count)
    return summaries


def distribution(db: Session, book_id: int) -> dict[int, int]:
    buckets = {value: 0 for value in RATING_VALUES}
    rows = (
        db.query(models.Review.rating, func.count(models.Review.id))
        .filter(models.Review.book_id == book_id)
        .group_by(models.Review.rating)
        .all()
    )
    for rating, count in rows:
        if rating in buckets:
            buckets[rating] = count
    return buckets


def stats_subquery(db: Session):
    """Per-book review count and average rating, for joining into book queries."""
    return (
        db.query(
            models.Review.book_id.label("book_id"),
            func.count(models.Review.id).label("review_count"),
            func.avg(models.Review.rating).label("average_rating"),
        )
        .group_by(models.Review.book_id)
        .subquery()
    )
