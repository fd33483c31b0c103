#!/usr/bin/env python3
"""
Load or remove the sample newspaper catalogue.

Usage:
    python seed_data.py --import
    python seed_data.py --delete
"""

import argparse
import asyncio
import logging
import sys

from sqlalchemy import delete, select

from infrastructure.database import close_db, get_db_context, init_db
from infrastructure.database.models import Newspaper, Subscription
from infrastructure.logging_config import setup_logging

logger = logging.getLogger("seed_data")

_UNSPLASH = "https://images.unsplash.com/photo-{}?w=800"


def _paper(name, description, publisher, languages, categories, prices, photo, rating, votes):
    monthly, quarterly, yearly = prices
    cover = _UNSPLASH.format(photo)
    return {
        "name": name,
        "description": description,
        "publisher": publisher,
        "languages": languages,
        "categories": categories,
        "price_monthly": monthly,
        "price_quarterly": quarterly,
        "price_yearly": yearly,
        "cover_image": cover,
        "images": [cover],
        "ratings_average": rating,
        "ratings_quantity": votes,
    }


SAMPLE_NEWSPAPERS = [
    _paper(
        "The Times of India",
        "Largest selling English daily in India with national, international, "
        "business, sports and entertainment coverage.",
        "Bennett, Coleman & Co. Ltd.",
        ["English"],
        ["daily", "business", "sports", "entertainment"],
        (300, 850, 3200),
        "1504711434969-e33886168f5c",
        4.5,
        1250,
    ),
    _paper(
        "The Hindu",
        "Respected national daily known for in-depth analysis and coverage of "
        "national and international affairs.",
        "The Hindu Group",
        ["English"],
        ["daily", "politics", "business"],
        (280, 800, 3000),
        "1495020689067-958852a7765e",
        4.7,
        980,
    ),
    _paper(
        "Hindustan Times",
        "English daily with breaking news and current affairs from India and abroad.",
        "HT Media Ltd.",
        ["English"],
        ["daily", "sports", "entertainment"],
        (290, 820, 3100),
        "1523995462485-3d171b5c8fa9",
        4.4,
        850,
    ),
    _paper(
        "Dainik Jagran",
        "Widely read Hindi daily covering news, politics, sports and entertainment.",
        "Jagran Prakashan Ltd.",
        ["Hindi"],
        ["daily", "politics", "sports"],
        (250, 700, 2600),
        "1585829365295-ab7cd400c167",
        4.6,
        1500,
    ),
    _paper(
        "Amar Ujala",
        "Hindi daily with news, sports, business and entertainment from across India.",
        "Amar Ujala Publications Ltd.",
        ["Hindi"],
        ["daily", "business", "sports"],
        (240, 680, 2500),
        "1504711434969-e33886168f5c",
        4.3,
        720,
    ),
    _paper(
        "The Economic Times",
        "Business daily reporting on the economy, finance, markets and corporate affairs.",
        "Bennett, Coleman & Co. Ltd.",
        ["English"],
        ["daily", "business", "technology"],
        (350, 1000, 3800),
        "1460925895917-afdab827c52f",
        4.8,
        650,
    ),
    _paper(
        "Mumbai Mirror",
        "Mumbai tabloid for local news, entertainment, sports and lifestyle.",
        "The Times Group",
        ["English"],
        ["daily", "entertainment", "sports"],
        (200, 550, 2000),
        "1586339949216-35c2747e8dc2",
        4.2,
        450,
    ),
    _paper(
        "Indian Express",
        "Trusted source for breaking news and current affairs from India and the world.",
        "The Indian Express Group",
        ["English"],
        ["daily", "politics", "business"],
        (270, 770, 2900),
        "1495020689067-958852a7765e",
        4.6,
        890,
    ),
    _paper(
        "Deccan Chronicle",
        "South Indian English daily covering news, sports, entertainment and lifestyle.",
        "Deccan Chronicle Holdings Limited",
        ["English"],
        ["daily", "sports", "entertainment"],
        (260, 740, 2800),
        "1523995462485-3d171b5c8fa9",
        4.3,
        520,
    ),
    _paper(
        "Business Standard",
        "Business newspaper on the Indian economy, finance and corporate news.",
        "Business Standard Private Ltd.",
        ["English"],
        ["daily", "business", "technology"],
        (340, 970, 3700),
        "1460925895917-afdab827c52f",
        4.7,
        430,
    ),
]


async def import_data() -> int:
    """Insert sample newspapers whose names are not already taken."""
    await init_db()
    async with get_db_context() as db:
        existing = set((await db.execute(select(Newspaper.name))).scalars().all())
        added = [Newspaper(**row) for row in SAMPLE_NEWSPAPERS if row["name"] not in existing]
        db.add_all(added)
    logger.info("Imported %d newspapers (%d already present)", len(added), len(existing))
    return len(added)


async def delete_data() -> int:
    """Remove every newspaper nobody has subscribed to."""
    subscribed = select(Subscription.newspaper_id).distinct()
    async with get_db_context() as db:
        result = await db.execute(delete(Newspaper).where(Newspaper.id.not_in(subscribed)))
    logger.info("Deleted %d newspapers", result.rowcount)
    return result.rowcount


async def _run(args: argparse.Namespace) -> None:
    try:
        if args.import_data:
            await import_data()
        else:
            await delete_data()
    finally:
        await close_db()


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument("--import", dest="import_data", action="store_true", help="Load samples")
    action.add_argument("--delete", dest="delete_data", action="store_true", help="Remove unsubscribed newspapers")
    args = parser.parse_args()

    setup_logging()
    try:
        asyncio.run(_run(args))
    except Exception as e:
        logger.error("Seeding failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
