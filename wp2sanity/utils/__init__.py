"""
Utility helpers used by the migration tool.

This subpackage exposes convenience functions for structured logging,
entity decoding and redirect map generation.
"""

from .entities import decode_entities
from .errors import ERRORS, report_error, report_ok
from .redirects import generate_redirects_csv

__all__ = ["ERRORS", "decode_entities", "report_error", "report_ok", "generate_redirects_csv"]
