"""
Shared fixtures: an in-memory async SQLite database per test and a fully valid application form.
"""
import unittest
from datetime import datetime, timezone

from sqlalchemy import func, select

from database import Base, build_engine, build_sessionmaker
from models import LoanApplication, TermsAcceptance, TermsVersion
from schemas.application import FormState

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

VALID_FORM_DATA = {
    "first_name": "Mary",
    "surname": "Kila",
    "date_of_birth": "1990-05-14",
    "gender": "female",
    "marital_status": "single",
    "district": "Moresby North-East",
    "village": "Gerehu",
    "home_province": "Central",
    "employment_status": "employed",
    "employer_name": "Pacific Traders",
    "occupation": "Accountant",
    "monthly_income": "3500",
    "employment_length": "5 years",
    "work_address": "12 Harbour Road",
    "work_phone": "+675 321 4567",
    "loan_amount": "12500.50",
    "loan_purpose": "School fees",
    "repayment_period": "24",
    "existing_loans": "no",
    "existing_loan_details": "",
    "reference_full_name": "John Tau",
    "reference_relationship": "Colleague",
    "reference_address": "4 Hill Street",
    "reference_phone": "+675 765 4321",
    "reference_occupation": "Engineer",
    "bank_name": "BSP",
    "account_number": "1002003004",
    "account_type": "savings",
    "branch_name": "Waigani",
    "account_holder_name": "Mary Kila",
}


def valid_form(**overrides) -> FormState:
    return FormState(**{**VALID_FORM_DATA, **overrides})


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.engine = build_engine(TEST_DATABASE_URL)
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self.session = build_sessionmaker(self.engine)()

    async def asyncTearDown(self):
        await self.session.close()
        await self.engine.dispose()

    async def publish_terms(self, terms_id="terms-v1", effective=datetime(2024, 1, 1, tzinfo=timezone.utc), **kwargs):
        terms = TermsVersion(id=terms_id, title=kwargs.pop("title", terms_id), effective_date=effective, **kwargs)
        self.session.add(terms)
        await self.session.commit()
        return terms

    async def add_application(self, app_id, user_id, status="draft", is_draft=True, **fields):
        app = LoanApplication(id=app_id, user_id=user_id, status=status, is_draft=is_draft, **fields)
        self.session.add(app)
        await self.session.commit()
        return app

    async def applications_for(self, user_id):
        result = await self.session.execute(
            select(LoanApplication)
            .where(LoanApplication.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().all()

    async def count_acceptances(self):
        result = await self.session.execute(select(func.count()).select_from(TermsAcceptance))
        return result.scalar_one()
