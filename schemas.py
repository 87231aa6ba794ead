from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# Users
class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"


class UserPublic(BaseModel):
    id: int
    name: str
    email: EmailStr

    model_config = ConfigDict(from_attributes=True)


# Books
class SortOption(str, Enum):
    latest = "latest"
    year_desc = "year_desc"
    year_asc = "year_asc"
    rating_desc = "rating_desc"


class BookBase(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    author: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=5000)
    genre: str | None = Field(default=None, max_length=100)
    year: int | None = Field(default=None, ge=0, le=9999)


class BookCreate(BookBase):
    pass


class BookUpdate(BookBase):
    pass


class BookView(BaseModel):
    id: int
    title: str
    author: str
    description: str | None
    genre: str | None
    year: int | None
    added_by: int
    added_by_name: str | None
    created_at: datetime
    average_rating: float
    review_count: int


class BookListResponse(BaseModel):
    books: list[BookView]
    total: int
    page: int
    per_page: int
    total_pages: int


class GenresResponse(BaseModel):
    genres: list[str]


# Reviews
class ReviewBase(BaseModel):
    rating: int = Field(ge=1, le=5)
    review_text: str | None = Field(default=None, max_length=5000)


class ReviewCreate(ReviewBase):
    pass


class ReviewUpdate(ReviewBase):
    pass


class ReviewView(BaseModel):
    id: int
    user_id: int
    user_name: str | None
    rating: int
    review_text: str | None
    created_at: datetime


class RatingDistributionResponse(BaseModel):
    distribution: dict[int, int]


# Profile
class ProfileReviewView(BaseModel):
    id: int
    book_id: int
    book_title: str | None
    book_author: str | None
    rating: int
    review_text: str | None
    created_at: datetime


class ProfileResponse(BaseModel):
    user: UserPublic
    books: list[BookView]
    reviews: list[ProfileReviewView]


class MessageResponse(BaseModel):
    message: str
