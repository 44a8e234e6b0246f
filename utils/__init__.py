"""Shared utilities for the backend."""
from utils.numbers import format_number, parse_float, parse_int, strict_float, strict_int

__all__ = [
    "format_number",
    "parse_float",
    "parse_int",
    "strict_float",
    "strict_int",
]
