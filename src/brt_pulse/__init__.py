"""Sentiment and engagement analytics for Lagos BRT passenger posts."""

from .data_prep import load_posts, normalize_posts, posts_from_records
from .filters import FilterConfig, apply_filters
from .metrics import sentiment_over_time, tag_distribution

__all__ = [
    "FilterConfig",
    "apply_filters",
    "load_posts",
    "normalize_posts",
    "posts_from_records",
    "sentiment_over_time",
    "tag_distribution",
]
