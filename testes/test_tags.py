import os
import sys

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from wp2sanity.utils.tags import count_tag_usage, normalize_label, tag_names, tag_size


def test_normalize_label_entities_and_whitespace():
    assert normalize_label("  Google   Tag&nbsp;Manager ") == "Google Tag Manager"
    assert normalize_label("R&amp;D") == "R&D"
    assert normalize_label("") == ""


def test_tag_size_thresholds():
    assert [tag_size(n) for n in (0, 1, 2, 4, 5, 12)] == ["sm", "sm", "default", "default", "lg", "lg"]


def test_count_tag_usage_across_posts():
    posts = [{"tags": [1, 2]}, {"tags": [2]}, {"tags": []}, {}]
    counts = count_tag_usage(posts)
    assert counts[1] == 1 and counts[2] == 2 and counts[3] == 0


def test_tag_names_skip_unknown_and_deduplicate_case_insensitive():
    tags_by_id = {
        1: {"id": 1, "name": "GA4"},
        2: {"id": 2, "name": "ga4"},
        3: {"id": 3, "name": "Segment &amp; CDP"},
    }
    assert tag_names([1, 99, 2, 3], tags_by_id) == ["GA4", "Segment & CDP"]
    assert tag_names(None, tags_by_id) == []
