from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

import auth, schemas
from config import settings
from database import get_db
from services import book_query, books, reviews

router = APIRouter(prefix="/books", tags=["Books"])


# Get Books
@router.get("/", response_model=schemas.BookListResponse)
def get_books(
    search: str | None = Query(default=None),
    genre: str | None = Query(default=None),
    sort_by: schemas.SortOption = Query(default=schemas.SortOption.latest),
    page: int = Query(default=1),
    per_page: int | None = Query(default=None, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    result = book_query.list_books(
        db,
        search=search,
        genre=genre,
        sort=sort_by,
        page=page,
        page_size=per_page,
    )
    return {
        "books": result.items,
        "total": result.total,
        "page": result.page,
        "per_page": result.page_size,
        "total_pages": result.total_pages,
    }


@router.get("/genres", response_model=schemas.GenresResponse)
def get_genres(db: Session = Depends(get_db)):
    return {"genres": book_query.list_genres(db)}


@router.get("/{book_id}", response_model=schemas.BookView)
def get_book(book_id: str, db: Session = Depends(get_db)):
    return book_query.get_book_view(db, book_id)


# Add Book
@router.post("/", response_model=schemas.BookView, status_code=status.HTTP_201_CREATED)
def add_book(
    book: schemas.BookCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(auth.get_current_user_id),
):
    return books.create_book(db, user_id, book)


@router.put("/{book_id}", response_model=schemas.BookView)
def update_book(
    book_id: str,
    book: schemas.BookUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(auth.get_current_user_id),
):
    return books.update_book(db, user_id, book_id, book)


@router.delete("/{book_id}", response_model=schemas.MessageResponse)
def delete_book(
    book_id: str,
    db: Session = Depends(get_db),
    user_id: int = Depends(auth.get_current_user_id),
):
    books.delete_book(db, user_id, book_id)
    return {"message": "Book deleted successfully"}


# Reviews nested under a book
@router.get("/{book_id}/reviews", response_model=list[schemas.ReviewView])
def get_book_reviews(book_id: str, db: Session = Depends(get_db)):
    return reviews.list_reviews(db, book_id)


@router.get("/{book_id}/rating-distribution", response_model=schemas.RatingDistributionResponse)
def get_rating_distribution(book_id: str, db: Session = Depends(get_db)):
    return {"distribution": reviews.rating_distribution(db, book_id)}


@router.post(
    "/{book_id}/reviews",
    response_model=schemas.MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_review(
    book_id: str,
    review: schemas.ReviewCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(auth.get_current_user_id),
):
    reviews.create_review(db, user_id, book_id, review)
    return {"message": "Review added"}
