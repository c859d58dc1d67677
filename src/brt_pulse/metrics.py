from __future__ import annotations

import logging
from typing import Any, Dict

import pandas as pd

from .data_prep import display_tag, is_no_tag, split_tags, tag_key
from .records import SENTIMENT_BUCKET_COLUMNS, SENTIMENTS, TAG_SUMMARY_COLUMNS

logger = logging.getLogger(__name__)

GRANULARITIES = ("daily", "monthly")


def _sentiment_flags(sentiment: pd.Series) -> pd.DataFrame:
    # exact match on the lower-cased label; anything else flags nothing
    return pd.DataFrame({s: (sentiment == s).astype(int) for s in SENTIMENTS}, index=sentiment.index)


def sentiment_over_time(df: pd.DataFrame, granularity: str = "daily") -> pd.DataFrame:
    """
    One row per date bucket, oldest first:
      date (bucket key), period_start, positive, negative, neutral,
      total_engagements, total_replies
    daily   -> key is the post's date string as exported
    monthly -> key is the first day of the post's month (YYYY-MM-01)
    Posts without a usable date are left out.
    """
    if granularity not in GRANULARITIES:
        raise ValueError(f"granularity must be one of {GRANULARITIES}, got {granularity!r}")

    dated = df.loc[df["ts"].notna()]
    if dated.empty:
        return pd.DataFrame(columns=SENTIMENT_BUCKET_COLUMNS)

    if granularity == "monthly":
        period_start = dated["ts"].dt.to_period("M").dt.to_timestamp()
        key = period_start.dt.strftime("%Y-%m-%d")
    else:
        period_start = dated["ts"]
        key = dated["date_of_post"]

    work = _sentiment_flags(dated["sentiment"])
    work["total_engagements"] = dated["total_engagements"]
    work["total_replies"] = dated["total_replies"]
    work["date"] = key
    work["period_start"] = period_start

    buckets = work.groupby("date", sort=False).agg(
        period_start=("period_start", "first"),
        positive=("positive", "sum"),
        negative=("negative", "sum"),
        neutral=("neutral", "sum"),
        total_engagements=("total_engagements", "sum"),
        total_replies=("total_replies", "sum"),
    ).reset_index()

    # chronological, never lexical ("2 Jan" before "10 Jan")
    buckets = buckets.sort_values("period_start", kind="stable").reset_index(drop=True)
    logger.debug("%d %s buckets from %d dated posts", len(buckets), granularity, len(dated))
    return buckets[SENTIMENT_BUCKET_COLUMNS]


def tag_distribution(df: pd.DataFrame, top_n: int = 10) -> pd.DataFrame:
    """Sentiment breakdown per tag, largest first, cut to ``top_n`` (ties keep first-seen order)."""
    buckets: Dict[str, Dict[str, Any]] = {}
    for tags, sentiment in zip(df["tags"], df["sentiment"]):
        for raw in split_tags(tags):
            if is_no_tag(raw):
                continue
            b = buckets.setdefault(tag_key(raw), {
                "tag": display_tag(raw), "positive": 0, "negative": 0, "neutral": 0, "total": 0,
            })
            if sentiment in SENTIMENTS:
                b[sentiment] += 1
            b["total"] += 1

    if not buckets:
        return pd.DataFrame(columns=TAG_SUMMARY_COLUMNS)

    ranked = sorted(buckets.values(), key=lambda b: b["total"], reverse=True)[:top_n]
    return pd.DataFrame(ranked, columns=TAG_SUMMARY_COLUMNS)


# ----------------------------
# Headline numbers
# ----------------------------
def summary_totals(df: pd.DataFrame) -> Dict[str, Any]:
    # KPI cards: anything that isn't positive/negative is shown as neutral
    s = df["sentiment"]
    positive = int((s == "positive").sum())
    negative = int((s == "negative").sum())
    return {
        "posts": int(len(df)),
        "engagements": float(df["total_engagements"].sum()),
        "replies": float(df["total_replies"].sum()),
        "positive": positive,
        "negative": negative,
        "neutral": int(len(df)) - positive - negative,
    }


def sentiment_shares(totals: Dict[str, Any]) -> Dict[str, float]:
    n = totals["positive"] + totals["negative"] + totals["neutral"]
    if n == 0:
        return {s: 0.0 for s in SENTIMENTS}
    return {s: round(100.0 * totals[s] / n, 1) for s in SENTIMENTS}


def sentiment_summary_text(totals: Dict[str, Any]) -> str:
    return f"Positive: {totals['positive']}, Negative: {totals['negative']}, Neutral: {totals['neutral']}"


def top_tags_text(tags: pd.DataFrame, limit: int = 5) -> str:
    return ", ".join(f"{r['tag']} ({int(r['total'])})" for _, r in tags.head(limit).iterrows())
