import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import errors
import models
import schemas
from services import book_query, ownership, ratings

logger = logging.getLogger(__name__)


def validate_rating(rating) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int) or rating not in ratings.RATING_VALUES:
        raise errors.ValidationError("Rating must be an integer between 1 and 5")
    return rating


def get_review(db: Session, review_id) -> models.Review:
    review_pk = book_query.parse_identifier(review_id, "Review")
    review = db.query(models.Review).filter(models.Review.id == review_pk).first()
    if not review:
        raise errors.NotFoundError("Review not found")
    return review


def find_review(db: Session, book_id: int, user_id: int) -> models.Review | None:
    return (
        db.query(models.Review)
        .filter(models.Review.book_id == book_id, models.Review.user_id == user_id)
        .first()
    )


def list_reviews(db: Session, book_id) -> list[schemas.ReviewView]:
    book = book_query.get_book(db, book_id)
    reviews = (
        db.query(models.Review)
        .filter(models.Review.book_id == book.id)
        .order_by(models.Review.created_at.desc(), models.Review.id.desc())
        .all()
    )
    names = book_query.owner_names(db, [review.user_id for review in reviews])
    return [
        schemas.ReviewView(
            id=review.id,
            user_id=review.user_id,
            user_name=names.get(review.user_id),
            rating=review.rating,
            review_text=review.review_text,
            created_at=review.created_at,
        )
        for review in reviews
    ]


def rating_distribution(db: Session, book_id) -> dict[int, int]:
    book = book_query.get_book(db, book_id)
    return ratings.distribution(db, book.id)


def create_review(
    db: Session, actor_id: int, book_id, data: schemas.ReviewCreate
) -> models.Review:
    book = book_query.get_book(db, book_id)
    rating = validate_rating(data.rating)

    if find_review(db, book.id, actor_id):
        logger.info("User %s already reviewed book %s", actor_id, book.id)
        raise errors.DuplicateReviewError()

    review = models.Review(
        book_id=book.id,
        user_id=actor_id,
        rating=rating,
        review_text=data.review_text,
    )
    # The unique (book_id, user_id) constraint catches a concurrent create
    # that slipped past the check above.
    try:
        with db.begin_nested():
            db.add(review)
        db.commit()
    except IntegrityError as exc:
        logger.info("Concurrent duplicate review by user %s on book %s", actor_id, book.id)
        raise errors.DuplicateReviewError() from exc

    db.refresh(review)
    logger.info("Review %s added to book %s by user %s", review.id, book.id, actor_id)
    return review


def update_review(
    db: Session, actor_id: int, review_id, data: schemas.ReviewUpdate
) -> models.Review:
    review = get_review(db, review_id)
    ownership.ensure_owner(actor_id, review.user_id)

    review.rating = validate_rating(data.rating)
    review.review_text = data.review_text
    db.commit()
    db.refresh(review)
    return review


def delete_review(db: Session, actor_id: int, review_id) -> None:
    review = get_review(db, review_id)
    ownership.ensure_owner(actor_id, review.user_id)

    review_pk = review.id
    db.delete(review)
    db.commit()
    logger.info("Review %s deleted by user %s", review_pk, actor_id)
