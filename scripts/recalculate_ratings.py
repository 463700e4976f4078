#!/usr/bin/env python3
"""
Rating Repair Script

Recomputes averageRating / reviewCount for every book from its reviews.

A failed recompute after a review change leaves that book's rating stale
until the next change to one of its reviews. Run this to bring every book
back in line.

USAGE:
    python scripts/recalculate_ratings.py
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.config import get_settings
from app.database import AsyncSessionLocal, engine
from app.services.ratings import recalculate_all_book_ratings


async def main() -> int:
    async with AsyncSessionLocal() as db:
        updated = await recalculate_all_book_ratings(db)
    await engine.dispose()
    return updated


if __name__ == "__main__":
    logging.basicConfig(
        level=getattr(logging, get_settings().log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    count = asyncio.run(main())
    print(f"Recalculated ratings for {count} books.")
