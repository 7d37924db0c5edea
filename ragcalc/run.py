"""
Entry point for fetching LLM market prices from the command line.
Loads environment variables, initializes the database, scrapes the provider pages,
optionally structures them with Gemini and exports the records to CSV.

Usage:
    python -m ragcalc.run [--analyze] [--screenshots]
    python -m ragcalc.run --serve
"""

import asyncio
import logging
import os
import sys
import warnings
from datetime import datetime

# Suppress warnings
warnings.filterwarnings("ignore", category=FutureWarning, module="google.auth")
warnings.filterwarnings("ignore", category=FutureWarning, module="google.oauth2")
warnings.filterwarnings("ignore", message=".*Both GOOGLE_API_KEY and GEMINI_API_KEY.*")
warnings.filterwarnings("ignore", category=UserWarning, module="google.genai")

from ragcalc.config import LOG_DIR, PORT
from ragcalc.db.connection import AsyncSessionLocal
from ragcalc.db.init_db import init_db
from ragcalc.db.repository import SnapshotRepository
from ragcalc.export import export_prices_to_csv
from ragcalc.logging_utils import get_session_logger
from ragcalc.market.analyzer import PriceAnalyzer
from ragcalc.market.scraper import LLMPriceScraper


def print_records(records):
    for record in records:
        preview = record.pricing.replace("\n", " ").strip()
        if len(preview) > 120:
            preview = preview[:120] + "..."
        print(f"- {record.model_info}: {preview}")


async def main(args):
    """Main execution loop for the price CLI."""
    analyze = "--analyze" in args
    run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    session_logger = get_session_logger(run_id)
    print(f"Logging execution to: {os.path.join(LOG_DIR, f'ragcalc_{run_id}.log')}")

    await init_db()

    scraper = LLMPriceScraper(
        debug_screenshots="--screenshots" in args, session_logger=session_logger
    )
    records = []
    try:
        print("\n--- Fetching provider pricing pages ---\n")
        records = await scraper.scrape_all()
        print_records(records)

        if analyze:
            print("\n--- Analyzing pricing data ---\n")
            analyzer = PriceAnalyzer(session_logger=session_logger)
            result = await analyzer.analyze(
                records,
                on_progress=lambda provider, percent: print(
                    f"[{percent:5.1f}%] {provider or 'done'}"
                ),
            )
            records = result.analyzed_data
            print_records(records)

        async with AsyncSessionLocal() as session:
            await SnapshotRepository(session).save_many(records, analyzed=analyze)

    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        # Export whatever was collected, even on interruption
        os.makedirs(LOG_DIR, exist_ok=True)
        csv_file = os.path.join(LOG_DIR, f"prices_{run_id}.csv")
        print(f"\nExporting results to: {csv_file}")
        try:
            count = export_prices_to_csv(records, csv_file)
            print(f"Exported {count} records.")
        except OSError as e:
            print(f"Failed to export results: {e}")


def serve():
    import uvicorn

    uvicorn.run("ragcalc.api:app", host="0.0.0.0", port=PORT)


def cli():
    logging.basicConfig(level=logging.INFO)
    if "--serve" in sys.argv[1:]:
        serve()
    else:
        asyncio.run(main(sys.argv[1:]))


if __name__ == "__main__":
    cli()
