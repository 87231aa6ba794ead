import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import errors
import models
import schemas
import seed
from database import Base
from services import book_query, books, ownership, profile, ratings, reviews


@pytest.fixture
def users(db_session):
    alice = models.User(name="Alice", email="alice@example.com", password="x")
    bob = models.User(name="Bob", email="bob@example.com", password="x")
    db_session.add_all([alice, bob])
    db_session.commit()
    return alice, bob


@pytest.fixture
def book(db_session, users):
    alice, _ = users
    return books.create_book(
        db_session, alice.id, schemas.BookCreate(title="Emma", author="Jane Austen", year=1815)
    )


def _review(db, user_id, book_id, rating):
    return reviews.create_review(
        db, user_id, book_id, schemas.ReviewCreate(rating=rating, review_text="...")
    )


def test_aggregate_without_reviews(db_session, book):
    summary = ratings.aggregate(db_session, book.id)
    assert summary.count == 0
    assert summary.average == 0


def test_aggregate_reads_latest_write(db_session, users, book):
    alice, bob = users
    _review(db_session, alice.id, book.id, 5)
    assert ratings.aggregate(db_session, book.id) == (1, 5.0)

    _review(db_session, bob.id, book.id, 2)
    summary = ratings.aggregate(db_session, book.id)
    assert summary.count == 2
    assert summary.average == pytest.approx(3.5)


def test_aggregate_many_includes_unreviewed(db_session, users, book):
    alice, _ = users
    other = books.create_book(db_session, alice.id, schemas.BookCreate(title="Persuasion", author="Jane Austen"))
    _review(db_session, alice.id, book.id, 4)

    summaries = ratings.aggregate_many(db_session, [book.id, other.id])
    assert summaries[book.id] == (1, 4.0)
    assert summaries[other.id] == ratings.EMPTY_SUMMARY
    assert ratings.aggregate_many(db_session, []) == {}


def test_distribution_has_every_bucket(db_session, users, book):
    alice, bob = users
    _review(db_session, alice.id, book.id, 5)
    _review(db_session, bob.id, book.id, 5)
    assert ratings.distribution(db_session, book.id) == {1: 0, 2: 0, 3: 0, 4: 0, 5: 2}


def test_authorize():
    assert ownership.authorize(1, 1)
    assert not ownership.authorize(1, 2)
    assert not ownership.authorize(None, 1)


def test_ensure_owner_raises_forbidden():
    ownership.ensure_owner(3, 3)
    with pytest.raises(errors.ForbiddenError):
        ownership.ensure_owner(3, 4)


@pytest.mark.parametrize("rating", [0, 6, 2.5, "5", True])
def test_validate_rating_rejects(rating):
    with pytest.raises(errors.ValidationError) as exc_info:
        reviews.validate_rating(rating)
    assert exc_info.value.status_code == 422


def test_parse_identifier():
    assert book_query.parse_identifier("12") == 12
    assert book_query.parse_identifier(7) == 7
    assert book_query.parse_identifier(2**63 - 1) == 2**63 - 1
    for bad in ("abc", "0", "-3", 2**63, "99999999999999999999", True):
        with pytest.raises(errors.NotFoundError):
            book_query.parse_identifier(bad)


def test_duplicate_review_error(db_session, users, book):
    _, bob = users
    _review(db_session, bob.id, book.id, 3)
    with pytest.raises(errors.DuplicateReviewError):
        _review(db_session, bob.id, book.id, 1)
    assert ratings.aggregate(db_session, book.id) == (1, 3.0)


def test_delete_book_returns_removed_review_count(db_session, users, book):
    alice, bob = users
    _review(db_session, alice.id, book.id, 5)
    _review(db_session, bob.id, book.id, 4)

    with pytest.raises(errors.ForbiddenError):
        books.delete_book(db_session, bob.id, book.id)

    assert books.delete_book(db_session, alice.id, book.id) == 2
    assert db_session.query(models.Review).filter(models.Review.book_id == book.id).count() == 0
    with pytest.raises(errors.NotFoundError):
        book_query.get_book_view(db_session, book.id)


def test_list_books_page_metadata(db_session, users):
    alice, _ = users
    for i in range(11):
        books.create_book(db_session, alice.id, schemas.BookCreate(title=f"Vol {i}", author="Anon"))

    page = book_query.list_books(db_session, page=3, page_size=5)
    assert page.total == 11
    assert page.total_pages == 3
    assert len(page.items) == 1
    assert page.items[0].title == "Vol 0"

    empty = book_query.list_books(db_session, search="zzz")
    assert empty.items == []
    assert empty.total == 0
    assert empty.total_pages == 1


def test_profile_unknown_user(db_session):
    with pytest.raises(errors.NotFoundError):
        profile.get_profile(db_session, 999)


def test_seed_data_loads_demo_catalog(db_session):
    counts = seed.seed_data(db_session)
    assert counts == {"users": 3, "books": 6, "reviews": 7}

    result = book_query.list_books(db_session, sort=schemas.SortOption.rating_desc, page_size=6)
    assert result.total == 6
    top = result.items[0]
    assert top.average_rating == 5
    assert book_query.list_genres(db_session) == sorted(b["genre"] for b in seed.BOOKS)

    gatsby = next(item for item in result.items if item.title == "The Great Gatsby")
    assert gatsby.review_count == 2
    assert gatsby.average_rating == pytest.approx(4.5)

    hobbit = book_query.list_books(db_session, search="tolkien").items
    assert [b.title for b in hobbit] == ["The Hobbit"]


def test_destroy_data(db_session):
    seed.seed_data(db_session)
    seed.destroy_data(db_session)
    assert db_session.query(models.Book).count() == 0
    assert db_session.query(models.User).count() == 0
    assert db_session.query(models.Review).count() == 0


def test_list_books_past_last_page(db_session, users):
    alice, _ = users
    books.create_book(db_session, alice.id, schemas.BookCreate(title="Emma", author="Jane Austen"))

    result = book_query.list_books(db_session, page=10**19, page_size=5)
    assert result.items == []
    assert result.total == 1


def test_list_books_rejects_unknown_sort(db_session):
    with pytest.raises(errors.ValidationError):
        book_query.list_books(db_session, sort="popularity")


def test_unique_constraint_catches_concurrent_duplicate(db_session, users, book, monkeypatch):
    _, bob = users
    _review(db_session, bob.id, book.id, 3)

    # A second writer that checked before the first one committed sees no review.
    monkeypatch.setattr(reviews, "find_review", lambda db, book_id, user_id: None)
    with pytest.raises(errors.DuplicateReviewError):
        _review(db_session, bob.id, book.id, 1)

    assert ratings.aggregate(db_session, book.id) == (1, 3.0)


@pytest.fixture
def committed_session():
    """A session on its own database whose commits and rollbacks are real."""
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()
    engine.dispose()


def test_delete_book_failure_keeps_book_and_reviews(committed_session, monkeypatch):
    db = committed_session
    owner = models.User(name="Alice", email="alice@example.com", password="x")
    reader = models.User(name="Bob", email="bob@example.com", password="x")
    db.add_all([owner, reader])
    db.commit()
    book = books.create_book(db, owner.id, schemas.BookCreate(title="Emma", author="Jane Austen"))
    _review(db, reader.id, book.id, 4)

    def failing_delete(instance):
        raise OperationalError("DELETE FROM books", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "delete", failing_delete)
    with pytest.raises(OperationalError):
        books.delete_book(db, owner.id, book.id)
    monkeypatch.undo()

    assert db.query(models.Book).filter(models.Book.id == book.id).count() == 1
    assert db.query(models.Review).filter(models.Review.book_id == book.id).count() == 1
    assert ratings.aggregate(db, book.id) == (1, 4.0)
