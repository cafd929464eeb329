"""
Test: get_financial_statements for the latest period, saving attachments
Usage:
  python tests/functional/test_statements.py [business_id] [register] [output_dir]
"""

import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from tests.functional._common import load_settings


async def main():
    settings = load_settings()
    if settings is None:
        return
    business_id = sys.argv[1] if len(sys.argv) > 1 else settings["business_id"]
    register = sys.argv[2] if len(sys.argv) > 2 else "krek"
    output_dir = sys.argv[3] if len(sys.argv) > 3 else "statements"
    if not business_id:
        print("Pass a business id or set BUSINESS_ID in credentials.txt")
        return
    from prh_virre import VirreClient

    async with VirreClient(settings["credentials"], settings["config"]) as client:
        periods = await client.get_financial_periods(business_id, register)
        if not periods.get("financialPeriods"):
            print("No financial periods found")
            return
        period = periods["financialPeriods"][-1]
        print("Fetching statements for", period["startDate"], "-", period["endDate"])
        statements = await client.get_financial_statements(
            business_id, register, period["startDate"], period["endDate"]
        )
        print(json.dumps(statements.metadata, indent=2, ensure_ascii=False))
        for path in statements.save_attachments(output_dir):
            print("Saved", path)


if __name__ == "__main__":
    asyncio.run(main())
