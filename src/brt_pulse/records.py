"""Row contracts for the BRT sentiment export and the tables derived from it.

Posts travel through the pipeline as pandas DataFrames with the canonical
columns below. The dataclasses are typed row views for callers that would
rather not deal with frames (JSON payloads, tests, the session snapshot).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Dict, Iterable, List, Tuple, Type, TypeVar

import pandas as pd

SENTIMENTS: Tuple[str, ...] = ("positive", "negative", "neutral")

# "no tag" placeholder written by the manual taggers
NO_TAG = "OTHERS"
TAG_ALIASES: Dict[str, str] = {"FAIRS": "FARES"}

NOISE_TOPIC = "Noise"
OTHERS_TOPIC = "Others"

# canonical column -> accepted export headers, highest precedence first
COLUMN_ALIASES: Dict[str, Tuple[str, ...]] = {
    "date_of_post": ("Date of Tweet", "Date of Post", "date"),
    "sentiment_label": ("sentiment text", "sentiment"),
    "total_engagements": ("Total Engagements", "engagements"),
    "total_replies": ("Number of Replies", "replies"),
    "tags": ("tags",),
    "topic_label": ("merged_label",),
    "topic_description": ("merged_description",),
    "text": ("cleaned tweet", "tweet", "tweet content"),
}
NUMERIC_COLUMNS: Tuple[str, ...] = ("total_engagements", "total_replies")

POST_COLUMNS: List[str] = list(COLUMN_ALIASES) + ["ts", "sentiment"]
SENTIMENT_BUCKET_COLUMNS: List[str] = [
    "date", "period_start", "positive", "negative", "neutral",
    "total_engagements", "total_replies",
]
TAG_SUMMARY_COLUMNS: List[str] = ["tag", "positive", "negative", "neutral", "total"]


@dataclass(frozen=True)
class RawRecord:
    """One post after header resolution and numeric coercion.

    Attributes:
        date_of_post: Date exactly as exported; may be empty or malformed
        sentiment_label: Free-text sentiment, compared case-insensitively
        total_engagements: Engagement counter, 0 when missing or non-numeric
        total_replies: Reply counter, 0 when missing or non-numeric
        tags: Comma-separated manual tags
        topic_label: AI-assigned topic (``merged_label``)
        topic_description: Topic description, display only
        text: Post body used as model context
    """

    date_of_post: str = ""
    sentiment_label: str = ""
    total_engagements: float = 0.0
    total_replies: float = 0.0
    tags: str = ""
    topic_label: str = ""
    topic_description: str = ""
    text: str = ""


@dataclass
class SentimentBucket:
    """Sentiment counts and engagement sums for one date bucket."""

    date: str
    period_start: pd.Timestamp
    positive: int = 0
    negative: int = 0
    neutral: int = 0
    total_engagements: float = 0.0
    total_replies: float = 0.0

    def __post_init__(self) -> None:
        if min(self.positive, self.negative, self.neutral) < 0:
            raise ValueError("Sentiment counts must be non-negative")


@dataclass
class TagSummary:
    """Sentiment breakdown for one normalized tag."""

    tag: str
    positive: int = 0
    negative: int = 0
    neutral: int = 0
    total: int = 0

    def __post_init__(self) -> None:
        if min(self.positive, self.negative, self.neutral, self.total) < 0:
            raise ValueError("Tag counts must be non-negative")
        if self.positive + self.negative + self.neutral > self.total:
            raise ValueError("Sentiment counts cannot exceed the tag total")


T = TypeVar("T")


def frame_to_records(df: pd.DataFrame, cls: Type[T]) -> List[T]:
    """Build dataclass rows from the matching columns of ``df``."""
    names = [f.name for f in fields(cls)]
    return [cls(**{n: row[n] for n in names if n in row}) for row in df.to_dict("records")]


def records_to_frame(rows: Iterable[object], columns: List[str]) -> pd.DataFrame:
    """Inverse of :func:`frame_to_records`; an empty input keeps the column layout."""
    data = [asdict(r) for r in rows]
    if not data:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(data)[columns]
