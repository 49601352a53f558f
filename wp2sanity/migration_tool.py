"""
High-level orchestration of the WordPress → Sanity migration.

This module defines a :class:`WordPressMigrationTool` class that ties
together the extractor, the Portable Text converter, the Sanity
migrator and the utilities into a complete pipeline: fetch posts,
categories and tags from the WordPress REST API, write tag documents,
upload every image referenced by a post body, convert each body and
write the post document, then generate a redirect CSV.

Configuration is supplied via a JSON file path or directly as a
dictionary.  The ``sanity`` section must include ``project_id``,
``dataset``, ``api_version`` and ``token``; the ``wordpress`` section
needs ``base_url``.  Optional migration settings (dry-run, limit, new
site URL) live under the ``migration`` key.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import os
from typing import Any, Dict, List, Optional

import requests

from wp2sanity.extractors.wordpress_extractor import extract_image_urls, fetch_all, fetch_media
from wp2sanity.migrators.sanity_migrator import create_or_replace, upload_image_from_url
from wp2sanity.models.sanity_post import SanityImage, SanityPost, SanityTag, read_time
from wp2sanity.parsers.portable_text import convert_html_to_portable_text
from wp2sanity.utils.categories import map_category
from wp2sanity.utils.entities import decode_entities, excerpt_from_html, word_count
from wp2sanity.utils.errors import report_error, report_ok
from wp2sanity.utils.redirects import generate_redirects_csv, new_post_url
from wp2sanity.utils.tags import count_tag_usage, normalize_label, tag_names, tag_size

LOG_FILE = os.path.join("reports", "migration", "migration.log")


@dataclass
class MigrationStats:
    tags: int = 0
    posts_migrated: int = 0
    posts_failed: int = 0
    images_uploaded: int = 0
    images_failed: int = 0

    def summary(self) -> str:
        return (
            f"{self.tags} tags, {self.posts_migrated} posts migrated "
            f"({self.posts_failed} failed), {self.images_uploaded} images uploaded "
            f"({self.images_failed} failed)"
        )


class WordPressMigrationTool:
    """
    Encapsulates all state and behavior required to migrate a WordPress
    blog into a Sanity dataset.  This class is responsible for reading
    configuration, extracting posts, performing transformations and
    writing documents.  Per-post success and failure information is
    recorded using the :mod:`wp2sanity.utils.errors` module.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, *, config_file: Optional[str] = None) -> None:
        if config_file and os.path.exists(config_file):
            with open(config_file, "r", encoding="utf-8") as f:
                config = json.load(f)
        elif config is None:
            config = {}

        # Ensure essential keys exist to prevent KeyErrors
        config.setdefault("wordpress", {})
        config["wordpress"].setdefault("base_url", os.getenv("WP_BASE_URL", ""))
        config["wordpress"].setdefault("timeout", 30)

        config.setdefault("sanity", {})
        config["sanity"].setdefault("project_id", os.getenv("SANITY_PROJECT_ID", ""))
        config["sanity"].setdefault("dataset", os.getenv("SANITY_DATASET", "production"))
        config["sanity"].setdefault("api_version", "2024-07-01")
        config["sanity"].setdefault("timeout", 30)
        if not config["sanity"].get("token"):
            config["sanity"]["token"] = os.getenv("SANITY_TOKEN", "")

        config.setdefault("migration", {})
        config["migration"].setdefault("dry_run", False)
        config["migration"].setdefault("limit", None)
        config["migration"].setdefault("site_url", "")
        config["migration"].setdefault("redirects_csv", os.path.join("reports", "redirect_map.csv"))

        self.config = config
        self.stats = MigrationStats()

    @property
    def dry_run(self) -> bool:
        return bool(self.config["migration"].get("dry_run"))

    def log_message(self, message: str, level: str = "INFO") -> None:
        print(f"[{level}] {message}")
        os.makedirs(os.path.dirname(LOG_FILE), exist_ok=True)
        with open(LOG_FILE, "a", encoding="utf-8") as f:
            f.write(f"{level}: {message}\n")

    # --- Extraction ---

    def fetch_source(self) -> Dict[str, List[Dict[str, Any]]]:
        """Fetch posts, categories and tags from WordPress."""
        wp_cfg = self.config["wordpress"]
        self.log_message(f"Fetching from WordPress REST API at {wp_cfg['base_url']}")
        data = {name: fetch_all(wp_cfg, name) for name in ("posts", "categories", "tags")}
        for name, records in data.items():
            self.log_message(f"{name.capitalize()}: {len(records)}")
        return data

    # --- Tags ---

    def build_tags(self, posts: List[Dict[str, Any]], wp_tags: List[Dict[str, Any]]) -> List[SanityTag]:
        usage = count_tag_usage(posts)
        return [
            SanityTag(name=normalize_label(t.get("name", "")), slug=t["slug"], size=tag_size(usage.get(t["id"], 0)))
            for t in wp_tags
            if t.get("slug") and normalize_label(t.get("name", ""))
        ]

    def migrate_tags(self, posts: List[Dict[str, Any]], wp_tags: List[Dict[str, Any]]) -> int:
        tags = self.build_tags(posts, wp_tags)
        if not tags:
            return 0
        if self.dry_run:
            self.log_message(f"Dry-run: would write {len(tags)} tags")
        else:
            create_or_replace(self.config["sanity"], [t.to_document() for t in tags])
            report_ok("TAGS_WRITTEN", {"slug": "tags"}, {"count": len(tags)})
        self.stats.tags = len(tags)
        return len(tags)

    # --- Images ---

    def upload_images(self, posts: List[Dict[str, Any]]) -> Dict[str, str]:
        """Upload every image referenced by the post bodies; return ``url -> asset id``."""
        urls: List[str] = []
        for post in posts:
            for url in extract_image_urls((post.get("content") or {}).get("rendered", "")):
                if url not in urls:
                    urls.append(url)
        self.log_message(f"Found {len(urls)} unique image URLs")

        asset_map: Dict[str, str] = {}
        if self.dry_run:
            self.log_message("Dry-run: skipping image uploads")
            return asset_map

        for url in urls:
            asset_id = upload_image_from_url(self.config["sanity"], url)
            if asset_id:
                asset_map[url] = asset_id
                self.stats.images_uploaded += 1
            else:
                self.stats.images_failed += 1
                self.log_message(f"Image skipped: {url}", level="WARNING")
        self.log_message(f"{self.stats.images_uploaded} images uploaded, {self.stats.images_failed} failed")
        return asset_map

    def resolve_featured_image(self, post: Dict[str, Any], title: str, asset_map: Dict[str, str]) -> Optional[SanityImage]:
        media_id = post.get("featured_media") or 0
        if media_id <= 0:
            return None
        media = fetch_media(self.config["wordpress"], media_id)
        if not media or not media.get("source_url"):
            report_error("FEATURED_MEDIA", post)
            return None
        source_url = media["source_url"]
        asset_id = asset_map.get(source_url)
        if not asset_id and not self.dry_run:
            asset_id = upload_image_from_url(self.config["sanity"], source_url)
            if not asset_id:
                report_error("FEATURED_MEDIA", post)
                return None
            asset_map[source_url] = asset_id
        if not asset_id:
            # dry run: nothing was uploaded
            return None
        return SanityImage.from_asset(asset_id, alt=media.get("alt_text") or title)

    # --- Posts ---

    def build_post(
        self,
        post: Dict[str, Any],
        categories_by_id: Dict[int, Dict[str, Any]],
        tags_by_id: Dict[int, Dict[str, Any]],
        asset_map: Dict[str, str],
    ) -> SanityPost:
        """Assemble the post document for one WordPress post record."""
        html = (post.get("content") or {}).get("rendered", "")
        title = decode_entities((post.get("title") or {}).get("rendered", ""))
        return SanityPost(
            title=title,
            slug=post.get("slug"),
            published_at=f"{post['date_gmt']}Z",
            category=map_category(post.get("categories") or [], categories_by_id),
            tags=tag_names(post.get("tags") or [], tags_by_id),
            excerpt=excerpt_from_html((post.get("excerpt") or {}).get("rendered", "")),
            read_time=read_time(word_count(html)),
            main_image=self.resolve_featured_image(post, title, asset_map),
            body=convert_html_to_portable_text(html, asset_map),
        )

    def migrate_posts(
        self,
        posts: List[Dict[str, Any]],
        categories: List[Dict[str, Any]],
        wp_tags: List[Dict[str, Any]],
        asset_map: Dict[str, str],
    ) -> List[Dict[str, Any]]:
        """
        Convert and write each post.  A failure on one post is reported
        and the batch continues.

        :return: ``slug``/``link``/``new_url`` entries for migrated posts,
            suitable for :func:`generate_redirects_csv`.
        """
        categories_by_id = {c["id"]: c for c in categories}
        tags_by_id = {t["id"]: t for t in wp_tags}
        site_url = self.config["migration"].get("site_url") or ""
        migrated: List[Dict[str, Any]] = []

        for index, post in enumerate(posts, start=1):
            slug = post.get("slug") or ""
            try:
                doc = self.build_post(post, categories_by_id, tags_by_id, asset_map).to_document()
                if self.dry_run:
                    self.log_message(f"Dry-run: would write {doc['_id']} ({len(doc['body'])} blocks)")
                else:
                    create_or_replace(self.config["sanity"], [doc])
            except requests.RequestException as e:
                self.stats.posts_failed += 1
                report_error("SANITY_WRITE", post, e)
                self.log_message(f"Failed to write post '{slug}': {e}", level="ERROR")
                continue
            except (KeyError, ValueError) as e:
                self.stats.posts_failed += 1
                report_error("INVALID_POST", post, e)
                self.log_message(f"Skipping malformed post '{slug}': {e}", level="ERROR")
                continue

            self.stats.posts_migrated += 1
            new_url = new_post_url(site_url, slug) if site_url else None
            report_ok("POST_WRITTEN", post, {"document_id": doc["_id"]})
            self.log_message(f"[{index}/{len(posts)}] {doc['title'][:60]}")
            migrated.append({"slug": slug, "link": post.get("link"), "new_url": new_url})
        return migrated

    # --- Full run ---

    def run(self) -> MigrationStats:
        """Execute the complete migration and return the counters."""
        try:
            source = self.fetch_source()
        except requests.RequestException as e:
            report_error("WP_FETCH", {}, e)
            self.log_message(f"Could not fetch WordPress content: {e}", level="ERROR")
            return self.stats

        posts = source["posts"]
        limit = self.config["migration"].get("limit")
        if limit is not None:
            posts = posts[: int(limit)]

        try:
            self.migrate_tags(source["posts"], source["tags"])
        except requests.RequestException as e:
            report_error("SANITY_WRITE", {"slug": "tags"}, e)
            self.log_message(f"Failed to write tags: {e}", level="ERROR")

        asset_map = self.upload_images(posts)
        migrated = self.migrate_posts(posts, source["categories"], source["tags"], asset_map)

        site_url = self.config["migration"].get("site_url")
        if site_url and migrated:
            try:
                path = generate_redirects_csv(
                    migrated,
                    old_domain=self.config["wordpress"]["base_url"],
                    new_base=site_url,
                    out_path=self.config["migration"]["redirects_csv"],
                )
                self.log_message(f"Redirect CSV written to {path} with {len(migrated)} entries")
            except OSError as e:
                self.log_message(f"Failed to generate redirects: {e}", level="ERROR")

        self.log_message(f"Migration complete: {self.stats.summary()}")
        return self.stats
