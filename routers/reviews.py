from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import auth, schemas
from database import get_db
from services import reviews

router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.put("/{review_id}", response_model=schemas.MessageResponse)
def update_review(
    review_id: str,
    review: schemas.ReviewUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(auth.get_current_user_id),
):
    reviews.update_review(db, user_id, review_id, review)
    return {"message": "Review updated"}


@router.delete("/{review_id}", response_model=schemas.MessageResponse)
def delete_review(
    review_id: str,
    db: Session = Depends(get_db),
    user_id: int = Depends(auth.get_current_user_id),
):
    reviews.delete_review(db, user_id, review_id)
    return {"message": "Review deleted"}
