from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def slugify(value: str, max_length: int = 96) -> str:
    text = value.strip().lower()
    slug = re.sub(r"[^a-z0-9]+", "-", text).strip("-")
    return slug[:max_length].rstrip("-")


def read_time(words: int) -> str:
    return f"{max(1, math.ceil(words / 200))} min read"


class AssetReference(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = Field("reference", alias="_type")
    ref: str = Field(..., alias="_ref", min_length=1)


class SanityImage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = Field("image", alias="_type")
    asset: AssetReference
    alt: Optional[str] = None

    @classmethod
    def from_asset(cls, asset_id: str, alt: Optional[str] = None) -> "SanityImage":
        return cls(asset=AssetReference(ref=asset_id), alt=alt)


class Slug(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = Field("slug", alias="_type")
    current: str = Field(..., min_length=1)


class SanityTag(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    slug: str
    size: str = "default"

    @field_validator("size")
    @classmethod
    def _known_size(cls, v: str) -> str:
        return v if v in ("sm", "default", "lg") else "default"

    @property
    def document_id(self) -> str:
        return f"tag-{self.slug}"

    def to_document(self) -> dict[str, Any]:
        return {
            "_id": self.document_id,
            "_type": "tag",
            "name": self.name,
            "slug": Slug(current=self.slug).model_dump(by_alias=True),
            "size": self.size,
        }


class SanityPost(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    title: str = Field(..., min_length=1)
    slug: Optional[str] = Field(None, validate_default=True)
    published_at: datetime = Field(..., alias="publishedAt")
    category: str = "How-To"
    tags: list[str] = Field(default_factory=list)
    excerpt: str = ""
    read_time: Optional[str] = Field(None, alias="readTime")
    main_image: Optional[SanityImage] = Field(None, alias="mainImage")
    body: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("slug", mode="before")
    @classmethod
    def _ensure_slug(cls, v: Optional[str], info):  # type: ignore[override]
        if v is not None and v.strip():
            return v.strip()
        title = info.data.get("title")
        if isinstance(title, str) and title.strip():
            return slugify(title)
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def _dedup_tags(cls, v: Optional[list[str]]):
        if not v:
            return []
        seen = set()
        deduped = []
        for item in v:
            if item not in seen:
                seen.add(item)
                deduped.append(item)
        return deduped

    @property
    def document_id(self) -> str:
        return f"post-{self.slug}"

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "_id": self.document_id,
            "_type": "post",
            "title": self.title,
            "slug": Slug(current=self.slug or "").model_dump(by_alias=True),
            "publishedAt": self.published_at.isoformat().replace("+00:00", "Z"),
            "category": self.category,
            "tags": list(self.tags),
            "excerpt": self.excerpt,
            "body": self.body,
        }
        if self.read_time:
            doc["readTime"] = self.read_time
        if self.main_image is not None:
            doc["mainImage"] = self.main_image.model_dump(by_alias=True, exclude_none=True)
        return doc
