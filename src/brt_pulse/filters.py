"""Composable filter state for the dashboard.

A post survives when it passes the date-range predicate AND the predicate of
the active category mode. Tag mode and topic mode are exclusive: switching
modes keeps the other selection around but ignores it. An empty selection
for the active mode lets every post through.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Iterable, Optional, Tuple, Union

import pandas as pd

from .data_prep import split_tags, tag_key, topic_display
from .metrics import GRANULARITIES

logger = logging.getLogger(__name__)

CATEGORY_MODES = ("tags", "topics")
ALL_DATES = "all"

DateLike = Union[str, date, datetime, pd.Timestamp]
DateRange = Union[str, Tuple[pd.Timestamp, pd.Timestamp]]


def _to_day(value: DateLike) -> pd.Timestamp:
    ts = pd.Timestamp(value)
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.normalize()


def _blank(value: Optional[DateLike]) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _toggle(items: Tuple[str, ...], item: str) -> Tuple[str, ...]:
    if item in items:
        return tuple(i for i in items if i != item)
    return items + (item,)


@dataclass(frozen=True)
class FilterConfig:
    """Filter and aggregation state owned by the caller.

    Attributes:
        date_range: ``"all"`` or an inclusive ``(start, end)`` pair of calendar
            days. A pair with a missing end is treated as ``"all"``.
        category_mode: ``"tags"`` or ``"topics"``; only the active one filters
        selected_tags: Tags to match (any casing, aliases allowed)
        selected_topics: Topic labels as displayed (``Noise`` shown as ``Others``)
        granularity: Bucket size for the sentiment series
    """

    date_range: Union[DateRange, Tuple[Optional[DateLike], Optional[DateLike]], None] = ALL_DATES
    category_mode: str = "tags"
    selected_tags: Tuple[str, ...] = ()
    selected_topics: Tuple[str, ...] = ()
    granularity: str = "monthly"

    def __post_init__(self) -> None:
        if self.category_mode not in CATEGORY_MODES:
            raise ValueError(f"category_mode must be one of {CATEGORY_MODES}, got {self.category_mode!r}")
        if self.granularity not in GRANULARITIES:
            raise ValueError(f"granularity must be one of {GRANULARITIES}, got {self.granularity!r}")

        object.__setattr__(self, "selected_tags", tuple(dict.fromkeys(self.selected_tags)))
        object.__setattr__(self, "selected_topics", tuple(dict.fromkeys(self.selected_topics)))

        rng = self.date_range
        if rng is None or isinstance(rng, str):
            if rng not in (None, ALL_DATES):
                raise ValueError(f"date_range must be {ALL_DATES!r} or a (start, end) pair, got {rng!r}")
            object.__setattr__(self, "date_range", ALL_DATES)
            return

        start, end = rng
        if _blank(start) or _blank(end):
            # half-filled custom range: no date constraint yet
            object.__setattr__(self, "date_range", ALL_DATES)
            return
        start_day, end_day = _to_day(start), _to_day(end)
        if pd.isna(start_day) or pd.isna(end_day):
            raise ValueError(f"Unparseable date_range: {rng!r}")
        if start_day > end_day:
            raise ValueError(f"date_range start {start_day.date()} is after end {end_day.date()}")
        object.__setattr__(self, "date_range", (start_day, end_day))

    @property
    def has_date_range(self) -> bool:
        return not isinstance(self.date_range, str)

    def toggle_tag(self, tag: str) -> "FilterConfig":
        return replace(self, selected_tags=_toggle(self.selected_tags, tag))

    def toggle_topic(self, topic: str) -> "FilterConfig":
        return replace(self, selected_topics=_toggle(self.selected_topics, topic))


# ----------------------------
# Predicates
# ----------------------------
def date_mask(df: pd.DataFrame, date_range: DateRange) -> pd.Series:
    if isinstance(date_range, str):
        return pd.Series(True, index=df.index)
    start, end = date_range
    day = df["ts"].dt.normalize()
    # NaT compares False on both sides
    return (day >= start) & (day <= end)


def tag_mask(df: pd.DataFrame, selected: Iterable[str]) -> pd.Series:
    wanted = {tag_key(t) for t in selected if t.strip()}
    hits = df["tags"].map(lambda v: any(tag_key(t) in wanted for t in split_tags(v)))
    return hits.astype(bool)


def topic_mask(df: pd.DataFrame, selected: Iterable[str]) -> pd.Series:
    labels = df["topic_label"].map(topic_display)
    return (labels != "") & labels.isin(set(selected))


def apply_filters(df: pd.DataFrame, config: FilterConfig) -> pd.DataFrame:
    """Posts passing the date predicate AND the active category predicate, in input order."""
    mask = date_mask(df, config.date_range)
    if config.category_mode == "tags" and config.selected_tags:
        mask &= tag_mask(df, config.selected_tags)
    elif config.category_mode == "topics" and config.selected_topics:
        mask &= topic_mask(df, config.selected_topics)

    out = df.loc[mask].reset_index(drop=True)
    logger.debug("Filters kept %d of %d posts", len(out), len(df))
    return out


# ----------------------------
# Filter choices
# ----------------------------
def tag_options(df: pd.DataFrame) -> list:
    """Distinct tag identities (upper-cased, aliases collapsed), sorted."""
    return sorted({tag_key(t) for v in df["tags"] for t in split_tags(v)})


def topic_options(df: pd.DataFrame) -> pd.DataFrame:
    """Distinct displayed topics with the first description seen for each, sorted by label."""
    opts = pd.DataFrame({
        "label": df["topic_label"].map(topic_display),
        "description": df["topic_description"],
    })
    opts = opts.loc[opts["label"] != ""].drop_duplicates("label", keep="first")
    return opts.sort_values("label", kind="stable").reset_index(drop=True)


def latest_post_date(df: pd.DataFrame) -> Optional[pd.Timestamp]:
    latest = df["ts"].max() if len(df) else pd.NaT
    return None if pd.isna(latest) else latest
