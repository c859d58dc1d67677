"""
Build dashboard-ready aggregates from a BRT sentiment CSV export.

Usage:
    brt-pulse --input data/lean_df.csv
    brt-pulse --start 2024-01-01 --end 2024-03-31 --granularity daily --tag FARES --plots
    brt-pulse --mode topics --topic "Bus Delays" --report
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from .config import Settings
from .dashboard import DashboardSession
from .data_prep import load_posts
from .filters import CATEGORY_MODES, FilterConfig
from .metrics import GRANULARITIES
from .viz import plot_engagement_over_time, plot_sentiment_over_time, plot_tag_distribution

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="brt-pulse",
        description="Aggregate BRT passenger sentiment posts into dashboard-ready JSON",
    )
    parser.add_argument("--input", default=None, help="Path to the sentiment CSV (default: settings data_path)")
    parser.add_argument("--output-dir", default=None, help="Where to write outputs (default: settings output_dir)")
    parser.add_argument("--start", default=None, help="First day of the date range (YYYY-MM-DD)")
    parser.add_argument("--end", default=None, help="Last day of the date range (YYYY-MM-DD)")
    parser.add_argument("--granularity", choices=GRANULARITIES, default="monthly")
    parser.add_argument("--mode", choices=CATEGORY_MODES, default="tags", help="Which category filter is active")
    parser.add_argument("--tag", action="append", default=[], help="Tag to keep (repeatable)")
    parser.add_argument("--topic", action="append", default=[], help="Topic label to keep (repeatable)")
    parser.add_argument("--plots", action="store_true", help="Also write PNG charts")
    parser.add_argument("--report", action="store_true", help="Also write report.json via OpenAI")
    parser.add_argument("--log-level", default=None, help="Logging level (default: settings log_level)")
    return parser


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or Settings.from_env()

    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    input_path = args.input or settings.data_path
    output_dir = args.output_dir or settings.output_dir
    if not os.path.exists(input_path):
        logger.error("Input file not found: %s", input_path)
        return 1
    if args.report and not settings.has_credentials:
        logger.error("--report needs OPENAI_API_KEY (env or .env)")
        return 1

    try:
        config = FilterConfig(
            date_range=(args.start, args.end) if (args.start or args.end) else "all",
            category_mode=args.mode,
            selected_tags=args.tag,
            selected_topics=args.topic,
            granularity=args.granularity,
        )
    except ValueError as e:
        logger.error("Invalid filters: %s", e)
        return 1

    session = DashboardSession(load_posts(input_path), settings=settings, config=config)
    logger.info("Posts: %d total, %d after filters", len(session.posts), len(session.filtered))

    os.makedirs(output_dir, exist_ok=True)
    if args.report:
        session.generate_report()
        with open(os.path.join(output_dir, "report.json"), "w", encoding="utf-8") as f:
            json.dump(session.report, f, indent=2, ensure_ascii=False)

    if args.plots:
        plot_sentiment_over_time(session.buckets, out_path=os.path.join(output_dir, "sentiment_over_time.png"))
        plot_engagement_over_time(session.buckets, out_path=os.path.join(output_dir, "engagement_over_time.png"))
        plot_tag_distribution(session.tags, out_path=os.path.join(output_dir, "tag_distribution.png"))

    out_path = os.path.join(output_dir, "aggregates.json")
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(session.snapshot(), f, indent=2, default=str, ensure_ascii=False)
    logger.info("Wrote aggregates to %s", out_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
