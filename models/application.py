from sqlalchemy import Boolean, Column, DateTime, Float, Index, Integer, String, Text, func, text

from database import Base


class LoanApplication(Base):
    __tablename__ = "loan_applications"
    __table_args__ = (
        # At most one open draft per user
        Index(
            "uq_loan_applications_open_draft",
            "user_id",
            unique=True,
            sqlite_where=text("is_draft"),
            postgresql_where=text("is_draft"),
        ),
    )

    id = Column(String(64), primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    status = Column(String(32), nullable=False, default="draft", index=True)
    is_draft = Column(Boolean, nullable=False, default=True)

    # Personal
    first_name = Column(String(128), nullable=True)
    surname = Column(String(128), nullable=True)
    date_of_birth = Column(String(32), nullable=True)
    gender = Column(String(32), nullable=True)
    marital_status = Column(String(32), nullable=True)
    district = Column(String(128), nullable=True)
    village = Column(String(128), nullable=True)
    home_province = Column(String(128), nullable=True)

    # Employment
    employment_status = Column(String(64), nullable=True)
    employer_name = Column(String(256), nullable=True)
    occupation = Column(String(128), nullable=True)
    # NULL only on drafts whose input was blank or not a number
    monthly_income = Column(Float, nullable=True)
    employment_length = Column(String(64), nullable=True)
    work_address = Column(Text, nullable=True)
    work_phone = Column(String(32), nullable=True)

    # Loan request
    loan_amount = Column(Float, nullable=True)
    loan_purpose = Column(Text, nullable=True)
    repayment_period = Column(Integer, nullable=True)
    existing_loans = Column(String(16), nullable=True)
    existing_loan_details = Column(Text, nullable=True)

    # Reference
    reference_full_name = Column(String(256), nullable=True)
    reference_relationship = Column(String(64), nullable=True)
    reference_address = Column(Text, nullable=True)
    reference_phone = Column(String(32), nullable=True)
    reference_occupation = Column(String(128), nullable=True)

    # Banking
    bank_name = Column(String(128), nullable=True)
    account_number = Column(String(64), nullable=True)
    account_type = Column(String(32), nullable=True)
    branch_name = Column(String(128), nullable=True)
    account_holder_name = Column(String(256), nullable=True)

    submitted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
