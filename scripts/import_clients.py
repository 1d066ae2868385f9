#!/usr/bin/env python3
"""
Import client records from CSV into the client store.

Expected columns (camelCase, as exported from the web app):
    id,name,shortName,email,phone,industry,paymentTerms,deliveryTerms,currency,status

Rows with an existing id are updated; rows without an id get a new one.

Usage:
    python scripts/import_clients.py data/clients.csv
    python scripts/import_clients.py data/clients.csv --dry-run
"""

import argparse
import csv
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.logging import get_logger
from processing.database import init_db, session_scope
from processing.models import Client, ClientStatus

logger = get_logger("import_clients")

FIELD_MAP = {
    "name": "name",
    "shortName": "short_name",
    "email": "email",
    "phone": "phone",
    "industry": "industry",
    "paymentTerms": "payment_terms",
    "deliveryTerms": "delivery_terms",
    "currency": "currency",
}


def parse_status(value: str) -> ClientStatus:
    try:
        return ClientStatus((value or "active").strip().lower())
    except ValueError:
        logger.warning(f"Unknown client status '{value}', using active")
        return ClientStatus.ACTIVE


def import_rows(db, rows, dry_run: bool = False) -> dict:
    """Insert or update clients from CSV rows. Returns counts."""
    stats = {"created": 0, "updated": 0, "skipped": 0}

    for line_no, row in enumerate(rows, start=2):
        name = (row.get("name") or "").strip()
        if not name:
            logger.warning(f"Line {line_no}: missing client name, skipped")
            stats["skipped"] += 1
            continue

        client_id = (row.get("id") or "").strip()
        client = db.get(Client, client_id) if client_id else None
        created = client is None
        if created:
            client = Client(id=client_id) if client_id else Client()

        for column, attr in FIELD_MAP.items():
            value = (row.get(column) or "").strip()
            if value:
                setattr(client, attr, value)
        # A blank status keeps the stored one (new clients start active)
        status = (row.get("status") or "").strip()
        if created or status:
            client.status = parse_status(status)

        if created:
            db.add(client)
            stats["created"] += 1
        else:
            stats["updated"] += 1
        # Later rows with the same id must see this one
        db.flush()

    if dry_run:
        db.rollback()
    else:
        db.commit()

    return stats


def main():
    parser = argparse.ArgumentParser(description="Import clients from CSV")
    parser.add_argument("path", type=Path, help="CSV file to import")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and count rows without writing",
    )

    args = parser.parse_args()

    if not args.path.exists():
        print(f"File not found: {args.path}", file=sys.stderr)
        sys.exit(1)

    init_db()

    with session_scope() as db, args.path.open(newline="", encoding="utf-8") as f:
        stats = import_rows(db, csv.DictReader(f), dry_run=args.dry_run)

    print("=" * 60)
    print("CLIENT IMPORT")
    print("=" * 60)
    print(f"Mode:    {'DRY RUN' if args.dry_run else 'LIVE'}")
    print(f"Created: {stats['created']}")
    print(f"Updated: {stats['updated']}")
    print(f"Skipped: {stats['skipped']}")


if __name__ == "__main__":
    main()
