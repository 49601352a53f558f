"""
Pydantic models for the documents written to Sanity.
"""

from .sanity_post import SanityImage, SanityPost, SanityTag

__all__ = ["SanityImage", "SanityPost", "SanityTag"]
