#!/usr/bin/env python3
"""
Resolve an extracted client name against known clients.

Usage:
    python scripts/match_client.py "ABC Manufacturing Sdn Bhd"
    python scripts/match_client.py "ABC Mfg" --clients-csv data/clients.csv
    python scripts/match_client.py "ABC Manuf" --limit 5 --json
"""

import argparse
import csv
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from processing.client_matching import Candidate, ClientMatchingService


def load_candidates_from_csv(path: Path) -> list[Candidate]:
    """Read client records exported as CSV (id,name,shortName,...)."""
    with path.open(newline="", encoding="utf-8") as f:
        return [
            Candidate.from_dict(row)
            for row in csv.DictReader(f)
            if (row.get("name") or "").strip()
        ]


def main():
    parser = argparse.ArgumentParser(
        description="Match an extracted client name to a known client"
    )
    parser.add_argument("name", help="Client name as extracted from the document")
    parser.add_argument(
        "--clients-csv",
        type=Path,
        help="Read clients from a CSV file instead of the database",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Number of suggestions to show (default from settings)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )

    args = parser.parse_args()

    service = ClientMatchingService()

    if args.clients_csv:
        if not args.clients_csv.exists():
            print(f"Clients file not found: {args.clients_csv}", file=sys.stderr)
            sys.exit(1)
        clients = load_candidates_from_csv(args.clients_csv)
    else:
        from processing.database import init_db, session_scope

        init_db()
        with session_scope() as db:
            clients = service.load_clients_for_matching(db)

    result = service.find_best_match(args.name, clients)
    suggestions = service.get_match_suggestions(args.name, clients, args.limit)

    if args.json:
        output = result.to_dict()
        output["matchName"] = result.match.name if result.match else None
        output["suggestions"] = [s.to_dict() for s in suggestions]
        print(json.dumps(output, indent=2))
        return

    print("=" * 60)
    print("CLIENT MATCH")
    print("=" * 60)
    print(f"Input:      {args.name}")
    print(f"Candidates: {len(clients)}")
    print("=" * 60)

    if result.is_match:
        print(f"Match:      {result.match.name} (id={result.match.id})")
    else:
        print("Match:      none (manual entry required)")
    print(f"Confidence: {result.confidence}%")
    print(f"Strategy:   {result.match_type.value}")

    if suggestions:
        print("\nSuggestions:")
        for i, s in enumerate(suggestions, 1):
            short = f" [{s.short_name}]" if s.short_name else ""
            print(f"  {i}. {s.name}{short} - {s.confidence}% ({s.match_type.value})")


if __name__ == "__main__":
    main()
