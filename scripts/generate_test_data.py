#!/usr/bin/env python3
"""
Generate a realistic holdings CSV for manual testing.
Usage: from project root:
  ./venv/bin/python scripts/generate_test_data.py [output.csv]
"""

import random
import sys
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path

# Add src to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from networth.core.timezone import now_local
from networth.csv import CsvExporter
from networth.domain.models import Category, Currency, Holding, IntValue, Market, TextValue


def generate_holdings(seed: int = 7) -> list[Holding]:
    """Build a seeded, plausible household portfolio."""
    rng = random.Random(seed)
    today = now_local()

    def created() -> datetime:
        return today - timedelta(days=rng.randint(0, 365))

    holdings = [
        Holding(category=Category.CASH, name="台新銀行", value=Decimal(rng.randrange(10_000, 200_000, 1_000)),
                note="活存", created_at=created()),
        Holding(category=Category.CASH, name="Chase", value=Decimal(rng.randrange(1_000, 20_000, 100)),
                currency=Currency.USD, extras={"currency": TextValue("USD")}, created_at=created()),
        Holding(category=Category.PROPERTY, name="新莊街90號3樓", value=Decimal("22000000"),
                created_at=created()),
        Holding(category=Category.MORTGAGE, name="新莊街90號3樓", value=Decimal(rng.randrange(3_000_000, 8_000_000, 10_000)),
                created_at=created()),
        Holding(category=Category.INSURANCE, name="國泰人壽", value=Decimal("400000"),
                note="儲蓄險", created_at=created()),
    ]

    stocks = [
        ("2330.TW", Market.TW),
        ("0056.TW", Market.TW),
        ("0050.TW", Market.TW),
        ("AMD", Market.US),
        ("TSLA", Market.US),
        ("NVDA", Market.US),
    ]
    for symbol, market in rng.sample(stocks, 4):
        shares = rng.choice([10, 50, 100, 200, 1000])
        holdings.append(
            Holding(
                category=Category.EQUITY,
                name=symbol,
                value=Decimal(shares),
                extras={
                    "isUSStock": TextValue("true" if market == Market.US else "false"),
                    "shares": IntValue(shares),
                    "symbol": TextValue(symbol),
                    "market": TextValue(market.value),
                },
                created_at=created(),
            )
        )
    return holdings


def main() -> int:
    output = Path(sys.argv[1]) if len(sys.argv) > 1 else project_root / "sample_holdings.csv"
    holdings = generate_holdings()
    CsvExporter().export_csv(holdings, str(output))
    print(f"Wrote {len(holdings)} holdings to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
