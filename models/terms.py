from sqlalchemy import Column, DateTime, ForeignKey, String, Text, func

from database import Base


class TermsVersion(Base):
    __tablename__ = "terms_versions"

    id = Column(String(64), primary_key=True, index=True)
    title = Column(String(256), nullable=False)
    content = Column(Text, nullable=True)
    effective_date = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class TermsAcceptance(Base):
    __tablename__ = "terms_acceptances"

    id = Column(String(64), primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    loan_application_id = Column(String(64), ForeignKey("loan_applications.id", ondelete="CASCADE"), nullable=False, index=True)
    terms_version_id = Column(String(64), ForeignKey("terms_versions.id"), nullable=False)
    accepted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
