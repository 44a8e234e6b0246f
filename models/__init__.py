from models.application import LoanApplication
from models.terms import TermsAcceptance, TermsVersion

__all__ = [
    "LoanApplication",
    "TermsAcceptance",
    "TermsVersion",
]
