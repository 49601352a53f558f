import os
import sys

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from wp2sanity.utils.categories import DEFAULT_CATEGORY, map_category, site_categories

CATEGORIES = {
    3: {"id": 3, "slug": "random-stuff"},
    4: {"id": 4, "slug": "google-analytics"},
    5: {"id": 5, "slug": "my-projects"},
    6: {"id": 6, "slug": "events"},
}


def test_first_known_category_wins():
    assert map_category([3, 4, 5], CATEGORIES) == "Google Analytics"
    assert map_category([5, 4], CATEGORIES) == "My Projects"


def test_events_fold_into_how_to():
    assert map_category([6], CATEGORIES) == "How-To"


def test_unknown_or_missing_categories_use_default():
    assert map_category([3, 42], CATEGORIES) == DEFAULT_CATEGORY
    assert map_category([], CATEGORIES) == DEFAULT_CATEGORY
    assert map_category(None, CATEGORIES) == DEFAULT_CATEGORY


def test_site_categories_are_distinct():
    assert site_categories() == [
        "How-To",
        "Thought Leadership",
        "Google Analytics",
        "Tracking Solutions",
        "My Projects",
    ]
