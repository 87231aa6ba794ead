from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import auth, schemas
from database import get_db
from services import profile

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("/", response_model=schemas.ProfileResponse)
def get_profile(
    db: Session = Depends(get_db),
    user_id: int = Depends(auth.get_current_user_id),
):
    return profile.get_profile(db, user_id)
