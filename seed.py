"""Load or clear demo catalog data.

    python seed.py            # clear everything, then load the demo set
    python seed.py --destroy  # clear everything
"""

import logging

import typer
from sqlalchemy.orm import Session

import auth
import models
from database import Base, SessionLocal, engine
from logging_config import setup_logging

logger = logging.getLogger(__name__)
cli = typer.Typer(add_completion=False)

DEMO_PASSWORD = "password123"

USERS = [
    {"name": "Alice Johnson", "email": "alice@example.com"},
    {"name": "Bob Williams", "email": "bob@example.com"},
    {"name": "Charlie Brown", "email": "charlie@example.com"},
]

BOOKS = [
    {
        "title": "To Kill a Mockingbird",
        "author": "Harper Lee",
        "published_year": 1960,
        "genre": "Classic",
        "description": "A coming-of-age tale in a Southern town, seen through the eyes of a "
        "young girl whose father defends a black man unjustly accused of a crime.",
    },
    {
        "title": "1984",
        "author": "George Orwell",
        "published_year": 1949,
        "genre": "Dystopian",
        "description": "Winston Smith, a lowly party member in a London ruled by the Party, "
        "begins to question the system watched over by Big Brother.",
    },
    {
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "published_year": 1925,
        "genre": "Fiction",
        "description": "Nick Carraway recounts his summer beside the wealthy Jay Gatsby at the "
        "height of the Roaring Twenties.",
    },
    {
        "title": "Pride and Prejudice",
        "author": "Jane Austen",
        "published_year": 1813,
        "genre": "Romance",
        "description": "Elizabeth Bennet learns the cost of hasty judgments in a romantic novel "
        "of manners.",
    },
    {
        "title": "The Hobbit",
        "author": "J.R.R. Tolkien",
        "published_year": 1937,
        "genre": "Fantasy",
        "description": "Bilbo Baggins is swept into a quest to reclaim the Dwarf Kingdom of "
        "Erebor from the dragon Smaug.",
    },
    {
        "title": "The Catcher in the Rye",
        "author": "J.D. Salinger",
        "published_year": 1951,
        "genre": "Literary Fiction",
        "description": "Two days in the life of Holden Caulfield after his expulsion from prep "
        "school.",
    },
]

# (book title, reviewer name, rating, text)
REVIEWS = [
    ("1984", "Alice Johnson", 5, "A masterpiece that is more relevant today than ever."),
    ("1984", "Bob Williams", 4, "A truly terrifying vision of the future."),
    ("The Great Gatsby", "Charlie Brown", 5, "Fitzgerald's prose is simply beautiful."),
    ("The Hobbit", "Alice Johnson", 5, "The perfect adventure story."),
    ("Pride and Prejudice", "Bob Williams", 4, "A witty and charming classic."),
    ("To Kill a Mockingbird", "Charlie Brown", 5, "An incredibly powerful and important book."),
    ("The Great Gatsby", "Alice Johnson", 4, "Captures the Jazz Age perfectly."),
]


def destroy_data(db: Session) -> None:
    db.query(models.Review).delete(synchronize_session=False)
    db.query(models.Book).delete(synchronize_session=False)
    db.query(models.User).delete(synchronize_session=False)
    db.commit()


def seed_data(db: Session) -> dict[str, int]:
    destroy_data(db)

    password = auth.hash_password(DEMO_PASSWORD)
    users = [models.User(password=password, **data) for data in USERS]
    db.add_all(users)
    db.flush()

    # Books go round-robin to the demo users.
    books = [
        models.Book(owner_id=users[index % len(users)].id, **data)
        for index, data in enumerate(BOOKS)
    ]
    db.add_all(books)
    db.flush()

    users_by_name = {user.name: user for user in users}
    books_by_title = {book.title: book for book in books}
    reviews = [
        models.Review(
            book_id=books_by_title[title].id,
            user_id=users_by_name[name].id,
            rating=rating,
            review_text=text,
        )
        for title, name, rating, text in REVIEWS
    ]
    db.add_all(reviews)
    db.commit()

    return {"users": len(users), "books": len(books), "reviews": len(reviews)}


@cli.command()
def main(
    destroy: bool = typer.Option(False, "--destroy", "-d", help="Only clear existing data."),
):
    setup_logging()
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if destroy:
            destroy_data(db)
            logger.info("Data destroyed")
            return
        counts = seed_data(db)
        logger.info(
            "Data imported: %(users)s users, %(books)s books, %(reviews)s reviews", counts
        )
    finally:
        db.close()


if __name__ == "__main__":
    cli()
