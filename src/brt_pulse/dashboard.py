"""Dashboard session: owns the posts, the filter state and the cached report.

Every update recomputes the filtered posts and all derived tables from
scratch. Cached report sections are dropped as soon as the filtered posts
differ from the ones the report was written for.
"""

import logging
from typing import Any, Dict, Optional

import pandas as pd

from .config import Settings
from .filters import FilterConfig, apply_filters, latest_post_date, tag_options, topic_options
from .metrics import (
    sentiment_over_time, sentiment_shares, sentiment_summary_text, summary_totals,
    tag_distribution, top_tags_text,
)
from .openai_llm import make_llm_call_fn
from .report import REPORT_SECTIONS, LLMCall, generate_report_section

logger = logging.getLogger(__name__)


class DashboardSession:
    """Single-user view state over one posts frame.

    Attributes:
        posts: Normalized posts (see ``data_prep.normalize_posts``)
        settings: Explicit configuration; the credential for reports lives here
        config: Current filter/aggregation state
        filtered: Posts passing ``config``
        buckets: Sentiment series for ``filtered`` at ``config.granularity``
        tags: Top tag distribution for ``filtered``
        totals: Headline numbers for ``filtered``
        report: Report paragraphs by section id, empty until generated
    """

    def __init__(
        self,
        posts: pd.DataFrame,
        settings: Optional[Settings] = None,
        config: Optional[FilterConfig] = None,
    ) -> None:
        self.posts = posts
        self.settings = settings or Settings()
        self.config = config or FilterConfig()
        self.filtered: Optional[pd.DataFrame] = None
        self.report: Dict[str, str] = {}
        self.update(self.config)

    def update(self, config: Optional[FilterConfig] = None) -> bool:
        """Apply ``config`` (or re-apply the current one). Returns True if the filtered posts changed."""
        config = config or self.config
        filtered = apply_filters(self.posts, config)
        changed = self.filtered is None or not filtered.equals(self.filtered)

        self.config = config
        self.filtered = filtered
        self.buckets = sentiment_over_time(filtered, config.granularity)
        self.tags = tag_distribution(filtered)
        self.totals = summary_totals(filtered)

        if changed and self.report:
            logger.info("Filtered posts changed; dropping %d cached report sections", len(self.report))
            self.report = {}
        return changed

    def set_posts(self, posts: pd.DataFrame) -> bool:
        self.posts = posts
        return self.update()

    def generate_report(self, llm_call_fn: Optional[LLMCall] = None) -> Dict[str, str]:
        """Write every report section, in order, for the current filtered posts."""
        if llm_call_fn is None:
            if not self.settings.has_credentials:
                raise ValueError("No OpenAI API key configured; set OPENAI_API_KEY or pass llm_call_fn.")
            llm_call_fn = make_llm_call_fn(self.settings.openai_api_key, self.settings.openai_model)

        self.report = {}
        summary = sentiment_summary_text(self.totals)
        top = top_tags_text(self.tags)
        for section in REPORT_SECTIONS:
            logger.info("Generating report section %s", section.id)
            self.report[section.id] = generate_report_section(
                section, self.filtered, summary, top, llm_call_fn=llm_call_fn,
            )
        return dict(self.report)

    def snapshot(self) -> Dict[str, Any]:
        """JSON-friendly payload of everything the charts and cards render."""
        rng = self.config.date_range
        buckets = self.buckets.copy()
        buckets["period_start"] = buckets["period_start"].map(lambda t: pd.Timestamp(t).isoformat())
        latest = latest_post_date(self.posts)
        return {
            "filters": {
                "date_range": rng if isinstance(rng, str) else [d.date().isoformat() for d in rng],
                "category_mode": self.config.category_mode,
                "selected_tags": list(self.config.selected_tags),
                "selected_topics": list(self.config.selected_topics),
                "granularity": self.config.granularity,
            },
            "totals": self.totals,
            "shares": sentiment_shares(self.totals),
            "sentiment_over_time": buckets.to_dict("records"),
            "tag_distribution": self.tags.to_dict("records"),
            "tag_options": tag_options(self.posts),
            "topic_options": topic_options(self.posts).to_dict("records"),
            "latest_post_date": latest.date().isoformat() if latest is not None else None,
            "report": dict(self.report),
        }
