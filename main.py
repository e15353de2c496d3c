#!/usr/bin/env python3
"""
IPO Calc - Entry point for running the application.

Usage:
    python main.py                      # Run web server
    python main.py --load data.json     # Load offering data, then exit
"""

import argparse
import asyncio
import logging

import uvicorn

from ipocalc.database import Database
from ipocalc.loader import load_json

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


async def load_data(path: str) -> None:
    """Load offering data from a JSON export into the database."""
    db = Database()
    await db.connect()
    try:
        counts = await load_json(db, path)
        logger.info(
            "Loaded %d stocks, %d tier rows, %d allotment rows",
            counts["stocks"],
            counts["apply_details"],
            counts["apply_tiers"],
        )
    finally:
        await db.close()


def main():
    parser = argparse.ArgumentParser(description="IPO Allotment Calculator")
    parser.add_argument("--load", metavar="FILE", help="Load offering data from a JSON file and exit")
    parser.add_argument("--host", default="::", help="Web server host")
    parser.add_argument("--port", type=int, default=3000, help="Web server port")
    args = parser.parse_args()

    if args.load:
        asyncio.run(load_data(args.load))
        return

    # The app's lifespan connects the DB in the event loop that serves requests
    logger.info(f"Running web server on {args.host}:{args.port}")
    uvicorn.run("ipocalc.app:app", host=args.host, port=args.port, log_level="info")


if __name__ == "__main__":
    main()
