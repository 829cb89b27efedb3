#!/usr/bin/env python3
"""Import a country's public holidays into a calendar.

Holidays come from the python-holidays package and are stored as one-off
YYYY-MM-DD entries. Dates already present in the calendar are skipped.

Usage:
    python scripts/import_country_holidays.py --calendar-code pl-holidays --year 2027
    python scripts/import_country_holidays.py --calendar-code es-madrid --country ES --region MD --year 2026 2027
"""

import os
import sys
import argparse
import logging

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.database import SessionLocal
from src.scheduling_bc.calendar.infrastructure.services import CalendarService, HolidayImporter

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description='Import public holidays into a calendar')
    parser.add_argument('--calendar-code', required=True, help='Target calendar code')
    parser.add_argument('--year', type=int, nargs='+', required=True, help='Year(s) to import')
    parser.add_argument('--country', help='ISO country code (defaults to the calendar country)')
    parser.add_argument('--region', help='Subdivision code (defaults to the calendar region)')
    args = parser.parse_args()

    db = SessionLocal()

    try:
        calendar = CalendarService(db).get_by_code(args.calendar_code)
        importer = HolidayImporter(db)

        total = 0
        for year in args.year:
            created = importer.import_year(calendar.id, year, args.country, args.region)
            logger.info(f"{calendar.code} {year}: {created} holidays added")
            total += created

        logger.info(f"Total: {total} entries created")

    except Exception as e:
        db.rollback()
        logger.error(f"Import failed: {e}")
        raise
    finally:
        db.close()


if __name__ == '__main__':
    main()
