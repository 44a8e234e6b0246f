"""
Publish the terms-and-conditions versions the wizard asks applicants to accept.
Run: python -m scripts.seed_terms (from the project root, with DB running).
"""
import asyncio
import os
import sys
from datetime import datetime, timezone

# Add parent so we can import from the project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from database import AsyncSessionLocal, init_db
from models import TermsVersion


TERMS_DATA = [
    {
        "id": "terms-2024-01",
        "title": "Loan Terms and Conditions v1",
        "content": "Initial loan terms and conditions.",
        "effective_date": datetime(2024, 1, 1, tzinfo=timezone.utc),
    },
    {
        "id": "terms-2025-07",
        "title": "Loan Terms and Conditions v2",
        "content": "Revised repayment, early settlement and data-sharing clauses.",
        "effective_date": datetime(2025, 7, 1, tzinfo=timezone.utc),
    },
]


async def seed():
    await init_db()
    async with AsyncSessionLocal() as session:
        for data in TERMS_DATA:
            existing = await session.execute(select(TermsVersion).where(TermsVersion.id == data["id"]))
            if existing.scalar_one_or_none():
                print(f"Terms version {data['id']} already exists, skipping")
                continue
            session.add(TermsVersion(**data))
            print(f"Published terms version: {data['title']}")
        await session.commit()
    print("Seed complete.")


if __name__ == "__main__":
    asyncio.run(seed())
