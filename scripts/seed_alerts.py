#!/usr/bin/env python3
"""
Alert Seeding Script

This script creates price alerts for the configured user, either with an
explicit target price or a small percentage away from the current market
price (handy for checking that notifications arrive).

Usage:
    python scripts/seed_alerts.py alerts.json

    Or with inline data:
    python scripts/seed_alerts.py --inline '[{"symbol": "PETR4", "direction": "ABOVE", "target_price": 40}]'

Input Format (JSON):
[
    {
        "symbol": "PETR4",
        "direction": "ABOVE",
        "target_price": 40.0       // Fixed target
    },
    {
        "symbol": "VALE3",
        "direction": "BELOW",
        "offset_pct": 1.0          // No target: offset from the current price
    }
]
"""
import asyncio
import json
import sys
import argparse
from pathlib import Path
from typing import Dict, List, Tuple

# Add parent directory to path to import pricealert modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from pricealert.core.config import settings
from pricealert.container import build_provider, build_store
from pricealert.services.alert_service import AlertService


async def seed_alerts(service: AlertService, alerts_data: List[Dict]) -> Tuple[int, int]:
    """
    Create alerts from a list of alert dictionaries.

    Args:
        service: AlertService to create alerts with
        alerts_data: List of alert dictionaries

    Returns:
        (created, skipped) counts
    """
    created_count = 0
    skipped_count = 0

    for alert_data in alerts_data:
        symbol = alert_data.get("symbol")
        direction = alert_data.get("direction")
        if not symbol or not direction:
            print("❌ Skipping alert: symbol and direction are required")
            skipped_count += 1
            continue

        if alert_data.get("target_price") is not None:
            result = await service.create_alert(symbol, alert_data["target_price"], direction)
        else:
            result = await service.create_near_market_alert(
                symbol,
                direction,
                offset_pct=alert_data.get("offset_pct", 1.0)
            )

        if result.ok:
            created_count += 1
            print(f"✅ {symbol} {result.alert.direction.value} {result.alert.target_price:.2f}")
            print(f"   Alert ID: {result.alert_id}")
        else:
            skipped_count += 1
            print(f"❌ Error creating alert for {symbol}: {result.reason}")

    return created_count, skipped_count


async def run(alerts_data: List[Dict]) -> None:
    if settings.store_backend == "sql":
        from pricealert.core.database import init_db
        await init_db()

    store = build_store()
    provider = build_provider()
    service = AlertService(store, provider)

    try:
        created_count, skipped_count = await seed_alerts(service, alerts_data)
    finally:
        await provider.close()
        await store.close()

    print("\n" + "=" * 60)
    print("Summary:")
    print(f"  ✅ Created: {created_count}")
    print(f"  ⚠️  Skipped: {skipped_count}")
    print(f"  📊 Total: {len(alerts_data)}")
    print("=" * 60)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Create price alerts for the configured user",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # From a JSON file
  python scripts/seed_alerts.py alerts.json

  # Fixed target
  python scripts/seed_alerts.py --inline '[{"symbol": "PETR4", "direction": "ABOVE", "target_price": 40}]'

  # 1% below the current price
  python scripts/seed_alerts.py --inline '[{"symbol": "VALE3", "direction": "BELOW"}]'
        """
    )

    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "file",
        nargs="?",
        help="Path to JSON file containing alert data"
    )
    group.add_argument(
        "--inline",
        help="Inline JSON string containing alert data"
    )

    args = parser.parse_args()

    # Load alert data
    try:
        if args.inline:
            alerts_data = json.loads(args.inline)
        else:
            with open(args.file, 'r') as f:
                alerts_data = json.load(f)

        if not isinstance(alerts_data, list):
            print("❌ Error: Alert data must be a JSON array")
            sys.exit(1)

    except json.JSONDecodeError as e:
        print(f"❌ Error parsing JSON: {e}")
        sys.exit(1)
    except FileNotFoundError:
        print(f"❌ Error: File not found: {args.file}")
        sys.exit(1)

    print("🚀 Seeding alerts...")
    print("=" * 60)
    asyncio.run(run(alerts_data))


if __name__ == "__main__":
    main()
