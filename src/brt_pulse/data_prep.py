# src/brt_pulse/data_prep.py
from __future__ import annotations

import logging
import re
from dataclasses import asdict, is_dataclass
from typing import Any, Iterable, List, Mapping, Optional, Union

import pandas as pd

from .records import (
    COLUMN_ALIASES, NO_TAG, NOISE_TOPIC, NUMERIC_COLUMNS, OTHERS_TOPIC,
    POST_COLUMNS, TAG_ALIASES,
)

logger = logging.getLogger(__name__)

_ALIAS_FAMILY = set(TAG_ALIASES) | set(TAG_ALIASES.values())


def normalize_text(s: Optional[str]) -> str:
    s = (s or "").strip()
    return re.sub(r"\s+", " ", s)


# ----------------------------
# Tags + topics
# ----------------------------
def split_tags(value: Any) -> List[str]:
    """'Fares, OTHERS ,Safety' -> ['Fares', 'OTHERS', 'Safety'] (empties dropped)."""
    if not isinstance(value, str):
        return []
    return [t.strip() for t in value.split(",") if t.strip()]


def tag_key(tag: str) -> str:
    """Identity used for comparing tags: upper-cased with aliases collapsed."""
    t = tag.strip().upper()
    return TAG_ALIASES.get(t, t)


def display_tag(tag: str) -> str:
    """Trimmed tag as written, except alias families show their canonical name."""
    t = tag.strip()
    return tag_key(t) if t.upper() in _ALIAS_FAMILY else t


def is_no_tag(tag: str) -> bool:
    return tag.strip().upper() == NO_TAG


def topic_display(label: Any) -> str:
    if not isinstance(label, str):
        return ""
    return OTHERS_TOPIC if label == NOISE_TOPIC else label


# ----------------------------
# Column coercion
# ----------------------------
def coerce_count(values: pd.Series) -> pd.Series:
    """Numeric counters arrive as text; anything non-numeric counts as 0."""
    txt = values.astype(str).str.strip()
    return pd.to_numeric(txt, errors="coerce").fillna(0.0).astype(float)


def parse_post_dates(values: pd.Series) -> pd.Series:
    """Parse export dates to naive timestamps; empty/malformed -> NaT."""
    txt = (values.fillna("").astype(str)
           .str.strip()
           .str.replace(r"[\u200b\u200e\ufeff]", "", regex=True))
    ts = pd.to_datetime(txt.where(txt != ""), errors="coerce", format="mixed", utc=True)
    return ts.dt.tz_localize(None)


def _coalesce(df: pd.DataFrame, sources: List[str]) -> pd.Series:
    # first non-blank value across sources wins, row by row
    out = pd.Series("", index=df.index, dtype=object)
    for src in reversed(sources):
        vals = df[src].fillna("").astype(str)
        out = vals.where(vals.str.strip() != "", out)
    return out


# ----------------------------
# Public entrypoints
# ----------------------------
def normalize_posts(df: pd.DataFrame) -> pd.DataFrame:
    """
    Resolve export headers to the canonical post columns once, up front:
      date_of_post, ts (parsed, NaT when unusable), sentiment_label,
      sentiment (lower-cased), total_engagements / total_replies (float, 0 fallback),
      tags, topic_label, topic_description, text
    Header matching is case-insensitive. Missing columns are filled with
    blanks (or 0 for counters) instead of failing.
    """
    if not isinstance(df, pd.DataFrame):
        raise ValueError(f"Expected a DataFrame of posts, got {type(df).__name__}")

    cols = {str(c).strip().lower(): c for c in df.columns}
    out = pd.DataFrame(index=df.index)
    for canon, aliases in COLUMN_ALIASES.items():
        sources = [cols[a.lower()] for a in aliases + (canon,) if a.lower() in cols]
        sources = list(dict.fromkeys(sources))
        raw = _coalesce(df, sources) if sources else pd.Series("", index=df.index, dtype=object)
        out[canon] = coerce_count(raw) if canon in NUMERIC_COLUMNS else raw

    out["text"] = out["text"].map(normalize_text)
    out["ts"] = parse_post_dates(out["date_of_post"])
    out["sentiment"] = out["sentiment_label"].str.lower()

    undated = int(out["ts"].isna().sum())
    if undated:
        logger.debug("%d of %d posts have no usable date", undated, len(out))
    return out[POST_COLUMNS].reset_index(drop=True)


def posts_from_records(rows: Iterable[Union[Mapping[str, Any], Any]]) -> pd.DataFrame:
    """Normalize in-memory rows (mappings or RawRecord instances)."""
    data = [asdict(r) if is_dataclass(r) else dict(r) for r in rows]
    return normalize_posts(pd.DataFrame.from_records(data) if data else pd.DataFrame())


def load_posts(path: str) -> pd.DataFrame:
    """Load the sentiment CSV export (every cell read as text) and normalize it."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False, skip_blank_lines=True)
    logger.info("Loaded %d posts from %s", len(df), path)
    return normalize_posts(df)
