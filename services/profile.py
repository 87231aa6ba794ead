from sqlalchemy.orm import Session

import errors
import models
import schemas
from services import book_query


def get_profile(db: Session, actor_id: int) -> schemas.ProfileResponse:
    user = db.query(models.User).filter(models.User.id == actor_id).first()
    if not user:
        raise errors.NotFoundError("User not found")

    owned = (
        db.query(models.Book)
        .filter(models.Book.owner_id == user.id)
        .order_by(models.Book.created_at.desc(), models.Book.id.desc())
        .all()
    )
    books = book_query.build_book_views(db, owned, owner_name=user.name)

    authored = (
        db.query(models.Review)
        .filter(models.Review.user_id == user.id)
        .order_by(models.Review.created_at.desc(), models.Review.id.desc())
        .all()
    )
    book_ids = {review.book_id for review in authored}
    reviewed = {}
    if book_ids:
        reviewed = {
            book.id: book
            for book in db.query(models.Book).filter(models.Book.id.in_(book_ids)).all()
        }

    reviews = []
    for review in authored:
        book = reviewed.get(review.book_id)
        reviews.append(
            schemas.ProfileReviewView(
                id=review.id,
                book_id=review.book_id,
                book_title=book.title if book else None,
                book_author=book.author if book else None,
                rating=review.rating,
                review_text=review.review_text,
                created_at=review.created_at,
            )
        )

    return schemas.ProfileResponse(
        user=schemas.UserPublic.model_validate(user),
        books=books,
        reviews=reviews,
    )
