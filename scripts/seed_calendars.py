#!/usr/bin/env python3
"""Seed the built-in Polish calendars.

Creates:
- pl-holidays: public holidays (fixed dates plus Easter-relative feasts)
- school-<voivodeship>-2026: winter and summer school breaks per voivodeship

Calendars whose code already exists are left untouched, so the script can be
re-run safely.

Usage:
    python scripts/seed_calendars.py
    python scripts/seed_calendars.py --only-holidays
"""

import os
import sys
import argparse
import logging

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.database import SessionLocal
from core.errors import NotFoundError
from src.scheduling_bc.calendar.infrastructure.services import CalendarService

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


PL_HOLIDAYS = [
    {'name': 'Nowy Rok', 'date_type': 'fixed', 'fixed_date': '01-01'},
    {'name': 'Trzech Kroli', 'date_type': 'fixed', 'fixed_date': '01-06'},
    {'name': 'Wielkanoc', 'date_type': 'easter_relative', 'easter_offset': 0},
    {'name': 'Poniedzialek Wielkanocny', 'date_type': 'easter_relative', 'easter_offset': 1},
    {'name': 'Swieto Pracy', 'date_type': 'fixed', 'fixed_date': '05-01'},
    {'name': 'Swieto Konstytucji 3 Maja', 'date_type': 'fixed', 'fixed_date': '05-03'},
    {'name': 'Zielone Swiatki', 'date_type': 'easter_relative', 'easter_offset': 49},
    {'name': 'Boze Cialo', 'date_type': 'easter_relative', 'easter_offset': 60},
    {'name': 'Wniebowziecie NMP', 'date_type': 'fixed', 'fixed_date': '08-15'},
    {'name': 'Wszystkich Swietych', 'date_type': 'fixed', 'fixed_date': '11-01'},
    {'name': 'Swieto Niepodleglosci', 'date_type': 'fixed', 'fixed_date': '11-11'},
    {'name': 'Boze Narodzenie (1)', 'date_type': 'fixed', 'fixed_date': '12-25'},
    {'name': 'Boze Narodzenie (2)', 'date_type': 'fixed', 'fixed_date': '12-26'},
]

# (code, name, winter break start, winter break end)
VOIVODESHIPS_2026 = [
    ('dolnoslaskie', 'Dolnoslaskie', '2026-01-12', '2026-01-25'),
    ('kujawsko-pomorskie', 'Kujawsko-Pomorskie', '2026-02-16', '2026-03-01'),
    ('lubelskie', 'Lubelskie', '2026-01-26', '2026-02-08'),
    ('lubuskie', 'Lubuskie', '2026-01-12', '2026-01-25'),
    ('lodzkie', 'Lodzkie', '2026-02-02', '2026-02-15'),
    ('malopolskie', 'Malopolskie', '2026-02-02', '2026-02-15'),
    ('mazowieckie', 'Mazowieckie', '2026-01-26', '2026-02-08'),
    ('opolskie', 'Opolskie', '2026-02-16', '2026-03-01'),
    ('podkarpackie', 'Podkarpackie', '2026-01-12', '2026-01-25'),
    ('podlaskie', 'Podlaskie', '2026-01-26', '2026-02-08'),
    ('pomorskie', 'Pomorskie', '2026-01-12', '2026-01-25'),
    ('slaskie', 'Slaskie', '2026-02-02', '2026-02-15'),
    ('swietokrzyskie', 'Swietokrzyskie', '2026-02-02', '2026-02-15'),
    ('warminsko-mazurskie', 'Warminsko-Mazurskie', '2026-01-26', '2026-02-08'),
    ('wielkopolskie', 'Wielkopolskie', '2026-01-12', '2026-01-25'),
    ('zachodniopomorskie', 'Zachodniopomorskie', '2026-02-16', '2026-03-01'),
]

SUMMER_BREAK_2026 = ('2026-06-27', '2026-08-31')


def calendar_exists(service: CalendarService, code: str) -> bool:
    try:
        service.get_by_code(code)
        return True
    except NotFoundError:
        return False


def seed_holidays(service: CalendarService) -> bool:
    if calendar_exists(service, 'pl-holidays'):
        logger.info("  pl-holidays already exists, skipping")
        return False

    service.create({
        'code': 'pl-holidays',
        'name': 'Polskie swieta panstwowe',
        'description': 'Dni ustawowo wolne od pracy w Polsce',
        'country': 'PL',
        'type': 'holidays',
        'entries': [dict(h, is_recurring=True) for h in PL_HOLIDAYS],
    })
    logger.info(f"  Created pl-holidays ({len(PL_HOLIDAYS)} entries)")
    return True


def seed_school_calendars(service: CalendarService) -> int:
    created = 0
    summer_start, summer_end = SUMMER_BREAK_2026

    for code, name, winter_start, winter_end in VOIVODESHIPS_2026:
        calendar_code = f'school-{code}-2026'
        if calendar_exists(service, calendar_code):
            continue

        service.create({
            'code': calendar_code,
            'name': f'Kalendarz szkolny - {name} 2025/2026',
            'description': f'Dni wolne od nauki w wojewodztwie {name.lower()} (rok szkolny 2025/2026)',
            'country': 'PL',
            'region': code,
            'type': 'school_days',
            'year': 2026,
            'entries': [
                {
                    'name': 'Ferie zimowe',
                    'date_type': 'fixed',
                    'start_date': winter_start,
                    'end_date': winter_end,
                    'is_recurring': False,
                },
                {
                    'name': 'Wakacje letnie',
                    'date_type': 'fixed',
                    'start_date': summer_start,
                    'end_date': summer_end,
                    'is_recurring': False,
                },
            ],
        })
        created += 1

    logger.info(f"  Created {created} school calendars")
    return created


def main():
    parser = argparse.ArgumentParser(description='Seed built-in Polish calendars')
    parser.add_argument(
        '--only-holidays',
        action='store_true',
        help='Seed only the public holidays calendar'
    )
    args = parser.parse_args()

    db = SessionLocal()

    try:
        service = CalendarService(db)

        logger.info("Seeding public holidays...")
        seed_holidays(service)

        if not args.only_holidays:
            logger.info("Seeding school calendars...")
            seed_school_calendars(service)

        logger.info("Done")

    except Exception as e:
        db.rollback()
        logger.error(f"Seeding failed: {e}")
        raise
    finally:
        db.close()


if __name__ == '__main__':
    main()
