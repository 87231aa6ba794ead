"""Book listing and detail views.

Filters run in the database; rating statistics are attached per page from
``services.ratings``. Sorting by rating orders the whole filtered set by its
computed average before paginating, so page boundaries stay globally
consistent.
"""

import logging
import math
from typing import Iterable, NamedTuple

from sqlalchemy import func
from sqlalchemy.orm import Session

import errors
import models
import schemas
from config import settings
from services import ratings

logger = logging.getLogger(__name__)

ALL_GENRES = "all"
MAX_IDENTIFIER = 2**63 - 1
_LIKE_ESCAPE = "\\"


class BookPage(NamedTuple):
    items: list[schemas.BookView]
    total: int
    page: int
    page_size: int
    total_pages: int


def parse_identifier(value, resource: str = "Resource") -> int:
    """Turn a path identifier into a row id; malformed ids resolve to NotFound."""
    if isinstance(value, bool):
        raise errors.NotFoundError(f"{resource} not found")
    try:
        identifier = value if isinstance(value, int) else int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise errors.NotFoundError(f"{resource} not found") from exc
    # Row ids are positive 64-bit integers.
    if not 1 <= identifier <= MAX_IDENTIFIER:
        raise errors.NotFoundError(f"{resource} not found")
    return identifier


def get_book(db: Session, book_id) -> models.Book:
    book_pk = parse_identifier(book_id, "Book")
    book = db.query(models.Book).filter(models.Book.id == book_pk).first()
    if not book:
        raise errors.NotFoundError("Book not found")
    return book


def _contains(term: str) -> str:
    escaped = (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def _filtered_query(db: Session, search: str | None, genre: str | None):
    query = db.query(models.Book)

    if search:
        pattern = _contains(search)
        query = query.filter(
            models.Book.title.ilike(pattern, escape=_LIKE_ESCAPE)
            | models.Book.author.ilike(pattern, escape=_LIKE_ESCAPE)
        )

    if genre and genre != ALL_GENRES:
        query = query.filter(models.Book.genre == genre)

    return query


def _ordered_query(db: Session, query, sort: schemas.SortOption):
    latest = (models.Book.created_at.desc(), models.Book.id.desc())

    if sort == schemas.SortOption.year_desc:
        return query.order_by(models.Book.published_year.desc(), *latest)
    if sort == schemas.SortOption.year_asc:
        return query.order_by(models.Book.published_year.asc(), *latest)
    if sort == schemas.SortOption.rating_desc:
        stats = ratings.stats_subquery(db)
        return query.outerjoin(stats, stats.c.book_id == models.Book.id).order_by(
            func.coalesce(stats.c.average_rating, 0).desc(),
            *latest,
        )
    return query.order_by(*latest)


def owner_names(db: Session, owner_ids: Iterable[int]) -> dict[int, str]:
    ids = set(owner_ids)
    if not ids:
        return {}
    rows = db.query(models.User.id, models.User.name).filter(models.User.id.in_(ids)).all()
    return {user_id: name for user_id, name in rows}


def to_book_view(
    book: models.Book, summary: ratings.RatingSummary, owner_name: str | None
) -> schemas.BookView:
    return schemas.BookView(
        id=book.id,
        title=book.title,
        author=book.author,
        description=book.description,
        genre=book.genre,
        year=book.published_year,
        added_by=book.owner_id,
        added_by_name=owner_name,
        created_at=book.created_at,
        average_rating=summary.average,
        review_count=summary.count,
    )


def build_book_views(
    db: Session, books: list[models.Book], owner_name: str | None = None
) -> list[schemas.BookView]:
    """Attach rating statistics and owner names to a list of books.

    ``owner_name`` skips the user lookup when every book is known to belong
    to the same, already loaded user.
    """
    summaries = ratings.aggregate_many(db, [book.id for book in books])
    names = {} if owner_name is not None else owner_names(db, [book.owner_id for book in books])
    return [
        to_book_view(
            book,
            summaries.get(book.id, ratings.EMPTY_SUMMARY),
            owner_name if owner_name is not None else names.get(book.owner_id),
        )
        for book in books
    ]


def list_books(
    db: Session,
    search: str | None = None,
    genre: str | None = None,
    sort: schemas.SortOption = schemas.SortOption.latest,
    page: int = 1,
    page_size: int | None = None,
) -> BookPage:
    page = max(1, page or 1)
    page_size = page_size or settings.DEFAULT_PAGE_SIZE
    if page_size < 1:
        raise errors.ValidationError("per_page must be a positive integer")

    try:
        sort = schemas.SortOption(sort)
    except ValueError as exc:
        raise errors.ValidationError(f"Unknown sort option: {sort}") from exc

    query = _filtered_query(db, search, genre)
    total = query.count()

    offset = (page - 1) * page_size
    books = []
    # Past the last match there is nothing to fetch.
    if offset < total:
        books = _ordered_query(db, query, sort).offset(offset).limit(page_size).all()
    logger.debug(
        "Listed books search=%r genre=%r sort=%s page=%s -> %s of %s",
        search, genre, sort, page, len(books), total,
    )

    return BookPage(
        items=build_book_views(db, books),
        total=total,
        page=page,
        page_size=page_size,
        total_pages=max(1, math.ceil(total / page_size)),
    )


def get_book_view(db: Session, book_id) -> schemas.BookView:
    book = get_book(db, book_id)
    names = owner_names(db, [book.owner_id])
    return to_book_view(book, ratings.aggregate(db, book.id), names.get(book.owner_id))


def list_genres(db: Session) -> list[str]:
    rows = db.query(models.Book.genre).distinct().all()
    return sorted(genre for (genre,) in rows if genre)
