from __future__ import annotations
import os
from typing import Optional, Tuple
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from .records import SENTIMENT_BUCKET_COLUMNS, SENTIMENTS, TAG_SUMMARY_COLUMNS

COLORS = {
    "positive": "#0ea5e9",
    "negative": "#f43f5e",
    "neutral": "#94a3b8",
    "engagements": "#0ea5e9",
    "replies": "#38bdf8",
}


def _ensure_dir(p: Optional[str]) -> None:
    if p:
        d = os.path.dirname(p)
        if d and not os.path.exists(d):
            os.makedirs(d, exist_ok=True)


def _require(df: pd.DataFrame, cols, name: str) -> None:
    missing = set(cols) - set(df.columns)
    if missing:
        raise ValueError(f"{name} is missing columns: {missing}")


def _finish(fig: plt.Figure, out_path: Optional[str], show: bool) -> Optional[str]:
    fig.tight_layout()
    saved = None
    if out_path:
        _ensure_dir(out_path)
        fig.savefig(out_path, dpi=150, bbox_inches="tight")
        saved = out_path
    if show:
        plt.show()
    else:
        plt.close(fig)
    return saved


def plot_sentiment_over_time(
    buckets: pd.DataFrame,
    out_path: Optional[str] = None,
    show: bool = False,
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    """
    Stacked areas of positive/negative/neutral post counts per bucket.
    Expects the output of metrics.sentiment_over_time (already in date order).
    """
    _require(buckets, SENTIMENT_BUCKET_COLUMNS, "buckets")

    fig, ax = plt.subplots(figsize=(12, 4.5))
    x = np.arange(len(buckets))
    ax.stackplot(
        x,
        *[buckets[s].astype(float).to_numpy() for s in SENTIMENTS],
        labels=[s.title() for s in SENTIMENTS],
        colors=[COLORS[s] for s in SENTIMENTS],
        alpha=0.8,
    )
    ax.set_xticks(x)
    ax.set_xticklabels(buckets["date"].astype(str).tolist(), rotation=45, ha="right", fontsize=8)
    ax.set_title("Sentiment over time")
    ax.set_ylabel("Posts")
    if len(buckets):
        ax.legend(loc="upper left", fontsize=9)

    saved = _finish(fig, out_path, show)
    return fig, ax, saved


def plot_engagement_over_time(
    buckets: pd.DataFrame,
    out_path: Optional[str] = None,
    show: bool = False,
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    """Engagement and reply totals per bucket (replies on a secondary axis)."""
    _require(buckets, SENTIMENT_BUCKET_COLUMNS, "buckets")

    fig, ax = plt.subplots(figsize=(12, 4.5))
    x = np.arange(len(buckets))
    ax.plot(x, buckets["total_engagements"].astype(float).to_numpy(),
            color=COLORS["engagements"], linewidth=1.8, label="Engagements")
    ax2 = ax.twinx()
    ax2.plot(x, buckets["total_replies"].astype(float).to_numpy(),
             color=COLORS["replies"], linewidth=1.2, linestyle="--", label="Replies")
    ax.set_xticks(x)
    ax.set_xticklabels(buckets["date"].astype(str).tolist(), rotation=45, ha="right", fontsize=8)
    ax.set_title("Engagement over time")
    ax.set_ylabel("Total engagements")
    ax2.set_ylabel("Replies")

    saved = _finish(fig, out_path, show)
    return fig, ax, saved


def plot_tag_distribution(
    tags: pd.DataFrame,
    out_path: Optional[str] = None,
    show: bool = False,
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    """Horizontal stacked bars per tag, biggest tag on top."""
    _require(tags, TAG_SUMMARY_COLUMNS, "tags")

    fig, ax = plt.subplots(figsize=(10, 0.45 * max(4, len(tags)) + 1.0))
    y = np.arange(len(tags))[::-1]
    left = np.zeros(len(tags))
    for s in SENTIMENTS:
        vals = tags[s].astype(float).to_numpy()
        ax.barh(y, vals, left=left, color=COLORS[s], label=s.title())
        left += vals
    ax.set_yticks(y)
    ax.set_yticklabels(tags["tag"].astype(str).tolist(), fontsize=9)
    ax.set_title(f"Top {len(tags)} tags by volume")
    ax.set_xlabel("Posts")
    if len(tags):
        ax.legend(loc="lower right", fontsize=9)

    saved = _finish(fig, out_path, show)
    return fig, ax, saved
