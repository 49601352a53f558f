"""
Parsers and converters used by the migration pipeline.

This subpackage exposes ``convert_html_to_portable_text`` and the key
generators it accepts.
"""

from .keys import KeyGenerator, RandomKeyGenerator, SequentialKeyGenerator
from .portable_text import PortableTextConverter, convert_html_to_portable_text

__all__ = [
    "KeyGenerator",
    "PortableTextConverter",
    "RandomKeyGenerator",
    "SequentialKeyGenerator",
    "convert_html_to_portable_text",
]
