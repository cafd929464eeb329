"""Minimal async example for VirreClient usage."""
import asyncio
import logging

from prh_virre import VirreClient

async def main():
    logging.basicConfig(level=logging.INFO)
    # Reads PRH_VIRRE_CLIENT_ID, PRH_VIRRE_CLIENT_SECRET, PRH_VIRRE_USER_NAME, PRH_VIRRE_PASSWORD
    async with VirreClient.from_env() as client:
        periods = await client.get_financial_periods("1234567-8", "krek")
        for period in periods["financialPeriods"]:
            statements = await client.get_financial_statements(
                "1234567-8", "krek", period["startDate"], period["endDate"]
            )
            for attachment in statements.attachments:
                print(period["endDate"], attachment.filename, attachment.type, attachment.size)

if __name__ == "__main__":
    asyncio.run(main())
