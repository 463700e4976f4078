#!/usr/bin/env python3
"""
Database Seed Script

Populates the database with sample users, books and reviews for
development.

USAGE:
    # Make sure you're in the project root with venv activated
    python scripts/seed_data.py            # skip if books already exist
    python scripts/seed_data.py --reset    # wipe and re-seed

This script:
1. Connects to the database using app settings
2. Creates tables if they don't exist
3. Registers four sample users (password: admin123)
4. Adds books and reviews through the services, so every book's
   averageRating / reviewCount is computed exactly as in the API
"""

import asyncio
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import AsyncSessionLocal, create_tables, engine
from app.models import Book, Review, User
from app.repositories import BookRepository
from app.services.auth import register_user
from app.services.books import create_book
from app.services.reviews import create_review

SAMPLE_PASSWORD = "admin123"

USERS = [
    ("Book Admin", "admin@bookreview.com"),
    ("Sarah Johnson", "sarah@example.com"),
    ("Mike Chen", "mike@example.com"),
    ("Emma Wilson", "emma@example.com"),
]

# (owner index, fields)
BOOKS = [
    (0, {
        "title": "To Kill a Mockingbird",
        "author": "Harper Lee",
        "description": "A gripping tale of racial injustice and childhood innocence in the "
                       "American South, seen through Scout Finch's eyes.",
        "genre": "Fiction",
        "published_year": 1960,
    }),
    (0, {
        "title": "1984",
        "author": "George Orwell",
        "description": "A dystopian masterpiece depicting a totalitarian future where Big "
                       "Brother watches everything.",
        "genre": "Sci-Fi",
        "published_year": 1949,
    }),
    (0, {
        "title": "Pride and Prejudice",
        "author": "Jane Austen",
        "description": "Elizabeth Bennet navigates societal expectations and her own "
                       "prejudices in this timeless romance.",
        "genre": "Romance",
        "published_year": 1813,
    }),
    (0, {
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "description": "Jay Gatsby's obsessive pursuit of Daisy Buchanan and the American "
                       "Dream in the Roaring Twenties.",
        "genre": "Fiction",
        "published_year": 1925,
    }),
    (0, {
        "title": "Harry Potter and the Philosopher's Stone",
        "author": "J.K. Rowling",
        "description": "Harry discovers he's a wizard and begins his magical education "
                       "at Hogwarts.",
        "genre": "Fantasy",
        "published_year": 1997,
    }),
    (0, {
        "title": "The Hobbit",
        "author": "J.R.R. Tolkien",
        "description": "Bilbo Baggins embarks on an unexpected adventure with dwarves "
                       "and a wizard.",
        "genre": "Fantasy",
        "published_year": 1937,
    }),
    (0, {
        "title": "The Da Vinci Code",
        "author": "Dan Brown",
        "description": "Symbologist Robert Langdon unravels centuries-old secrets hidden "
                       "in art and architecture.",
        "genre": "Thriller",
        "published_year": 2003,
    }),
    (0, {
        "title": "Sapiens: A Brief History of Humankind",
        "author": "Yuval Noah Harari",
        "description": "An exploration of human history from the Stone Age to the "
                       "modern era.",
        "genre": "History",
        "published_year": 2011,
    }),
    (1, {
        "title": "The Lord of the Rings",
        "author": "J.R.R. Tolkien",
        "description": "Frodo Baggins must destroy the One Ring in the fires of Mount "
                       "Doom to save Middle-earth.",
        "genre": "Fantasy",
        "published_year": 1954,
    }),
    (1, {
        "title": "Gone Girl",
        "author": "Gillian Flynn",
        "description": "When Amy Dunne disappears, her husband Nick becomes the prime "
                       "suspect.",
        "genre": "Thriller",
        "published_year": 2012,
    }),
    (2, {
        "title": "The Girl with the Dragon Tattoo",
        "author": "Stieg Larsson",
        "description": "A journalist and a hacker investigate a decades-old "
                       "disappearance in this Swedish mystery.",
        "genre": "Mystery",
        "published_year": 2005,
    }),
    (3, {
        "title": "Life of Pi",
        "author": "Yann Martel",
        "description": "Pi survives 227 days on a lifeboat in the Pacific with a "
                       "Bengal tiger.",
        "genre": "Adventure",
        "published_year": 2001,
    }),
    (3, {
        "title": "The Shining",
        "author": "Stephen King",
        "description": "Jack Torrance becomes the winter caretaker of the isolated "
                       "Overlook Hotel.",
        "genre": "Horror",
        "published_year": 1977,
    }),
    (1, {
        "title": "Educated",
        "author": "Tara Westover",
        "description": "A memoir of a woman who leaves a survivalist family in Idaho "
                       "and goes on to earn a PhD.",
        "genre": "Biography",
        "published_year": 2018,
    }),
]

# (book index, reviewer index, rating, text)
REVIEWS = [
    (0, 1, 5, "An absolute masterpiece! Heartbreaking and enlightening."),
    (0, 2, 5, "Timeless and powerful. The themes are as relevant as ever."),
    (0, 3, 4, "Beautiful writing and memorable characters."),
    (1, 1, 5, "Chillingly prophetic! Feels more relevant than ever."),
    (1, 2, 5, "Mind-blowing and terrifying in equal measure."),
    (2, 1, 5, "Austen's wit and social commentary are brilliant!"),
    (2, 3, 4, "Charming and cleverly written social satire."),
    (3, 1, 5, "Fitzgerald's prose is poetry. Masterful and haunting."),
    (3, 2, 4, "Vivid imagery of the Jazz Age, melancholic yet captivating."),
    (4, 1, 5, "Pure magic! A world so immersive you wish it were real."),
    (4, 2, 5, "Enchanting from page one."),
    (4, 3, 5, "Started a phenomenon for a reason."),
    (5, 1, 5, "A delightful adventure with phenomenal world-building."),
    (5, 2, 5, "Perfect introduction to Middle-earth."),
    (6, 1, 4, "Edge-of-your-seat thriller with fascinating puzzles."),
    (6, 3, 4, "Gripping mystery with great pacing."),
    (7, 1, 5, "Mind-expanding take on human history."),
    (7, 2, 5, "Brilliant and accessible. Changed how I view progress."),
    (8, 0, 5, "Epic fantasy at its finest!"),
    (8, 2, 5, "A masterpiece of fantasy literature."),
    (9, 0, 5, "Absolutely gripping! The twists kept me guessing."),
    (9, 2, 4, "Dark and twisted. The ending is unforgettable."),
    (10, 0, 5, "Intense mystery with unforgettable characters."),
    (10, 3, 4, "Gripping Scandinavian noir with a complex plot."),
    (11, 0, 5, "Magical realism at its best!"),
    (11, 1, 4, "Fascinating survival story with deeper meanings."),
    (12, 0, 5, "Terrifying! A master of psychological horror."),
    (12, 1, 5, "Genuinely scary. The descent into madness is brilliant."),
    (13, 0, 5, "Inspiring memoir about the power of education."),
    (13, 2, 5, "A testament to human resilience."),
]


async def clear_data(db: AsyncSession) -> None:
    """Clear all existing data from the database."""
    print("Clearing existing data...")
    await db.execute(delete(Review))
    await db.execute(delete(Book))
    await db.execute(delete(User))
    await db.commit()
    print("Data cleared.")


async def create_users(db: AsyncSession) -> list[User]:
    print("Creating users...")
    users = [
        await register_user(db, name=name, email=email, password=SAMPLE_PASSWORD)
        for name, email in USERS
    ]
    print(f"Created {len(users)} users.")
    return users


async def create_books(db: AsyncSession, users: list[User]) -> list[Book]:
    print("Creating books...")
    books = [
        await create_book(db, users[owner].id, fields)
        for owner, fields in BOOKS
    ]
    print(f"Created {len(books)} books.")
    return books


async def create_reviews(db: AsyncSession, users: list[User], books: list[Book]) -> int:
    """Each review goes through the review service, which refreshes ratings."""
    print("Creating reviews...")
    for book_index, user_index, rating, text in REVIEWS:
        await create_review(
            db,
            users[user_index].id,
            books[book_index].id,
            rating=rating,
            review_text=text,
        )
    print(f"Created {len(REVIEWS)} reviews.")
    return len(REVIEWS)


async def seed_database(clear_existing: bool = False) -> None:
    """
    Main function to seed the database.

    Args:
        clear_existing: If True, clears existing data before seeding.
            Otherwise seeding is skipped when books already exist.
    """
    print("=" * 60)
    print("Starting database seed...")
    print("=" * 60)

    await create_tables()

    async with AsyncSessionLocal() as db:
        if clear_existing:
            await clear_data(db)
        elif await BookRepository(db).count() > 0:
            print("Database already has data. Skipping (use --reset to re-seed).")
            return

        users = await create_users(db)
        books = await create_books(db, users)
        review_count = await create_reviews(db, users, books)

    await engine.dispose()

    print("=" * 60)
    print("Database seeding completed successfully!")
    print("=" * 60)
    print("\nSummary:")
    print(f"  - Users: {len(users)}")
    print(f"  - Books: {len(books)}")
    print(f"  - Reviews: {review_count}")
    print(f"\nLogin with any of these (password: {SAMPLE_PASSWORD}):")
    for _, email in USERS:
        print(f"  - {email}")


if __name__ == "__main__":
    asyncio.run(seed_database(clear_existing="--reset" in sys.argv[1:]))
