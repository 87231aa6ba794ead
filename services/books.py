import logging

from sqlalchemy.orm import Session

import models
import schemas
from services import book_query, ownership

logger = logging.getLogger(__name__)


def create_book(db: Session, actor_id: int, data: schemas.BookCreate) -> schemas.BookView:
    new_book = models.Book(
        title=data.title,
        author=data.author,
        description=data.description,
        genre=data.genre,
        published_year=data.year,
        owner_id=actor_id,
    )

    db.add(new_book)
    db.commit()
    db.refresh(new_book)

    logger.info("Book %s added by user %s", new_book.id, actor_id)
    return book_query.get_book_view(db, new_book.id)


def update_book(
    db: Session, actor_id: int, book_id, data: schemas.BookUpdate
) -> schemas.BookView:
    db_book = book_query.get_book(db, book_id)
    ownership.ensure_owner(actor_id, db_book.owner_id, "You can only edit your own books")

    db_book.title = data.title
    db_book.author = data.author
    db_book.description = data.description
    db_book.genre = data.genre
    db_book.published_year = data.year

    db.commit()
    db.refresh(db_book)

    logger.info("Book %s updated by user %s", db_book.id, actor_id)
    return book_query.get_book_view(db, db_book.id)


def delete_book(db: Session, actor_id: int, book_id) -> int:
    """Delete a book and every review of it in one transaction.

    Returns the number of reviews removed with the book.
    """
    db_book = book_query.get_book(db, book_id)
    ownership.ensure_owner(actor_id, db_book.owner_id, "You can only delete your own books")

    book_pk = db_book.id
    try:
        removed = (
            db.query(models.Review)
            .filter(models.Review.book_id == book_pk)
            .delete(synchronize_session=False)
        )
        db.delete(db_book)
        db.commit()
    except Exception:
        db.rollback()
        logger.error("Deleting book %s failed; nothing was removed", book_pk)
        raise

    logger.info("Book %s deleted by user %s with %s review(s)", book_pk, actor_id, removed)
    return removed
