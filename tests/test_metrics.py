"""Tests for the sentiment series and tag distribution aggregators."""

import pandas as pd
import pytest

from brt_pulse.data_prep import posts_from_records
from brt_pulse.metrics import (
    sentiment_over_time, sentiment_shares, sentiment_summary_text, summary_totals,
    tag_distribution, top_tags_text,
)
from brt_pulse.records import (
    SENTIMENT_BUCKET_COLUMNS, TAG_SUMMARY_COLUMNS, TagSummary, frame_to_records, records_to_frame,
)


class TestSentimentOverTime:
    def test_monthly_buckets(self, posts):
        out = sentiment_over_time(posts, "monthly")
        assert list(out.columns) == SENTIMENT_BUCKET_COLUMNS
        assert out["date"].tolist() == ["2024-01-01", "2024-02-01"]
        jan, feb = out.iloc[0], out.iloc[1]
        assert (jan["positive"], jan["negative"], jan["neutral"]) == (1, 1, 0)
        assert jan["total_engagements"] == 15.0
        assert jan["total_replies"] == 3.0
        # "mixed" hits no counter but its engagement still counts
        assert (feb["positive"], feb["negative"], feb["neutral"]) == (0, 0, 1)
        assert feb["total_engagements"] == 7.0
        assert out.loc[0, "period_start"] == pd.Timestamp("2024-01-01")

    def test_daily_keys_are_exported_strings(self, posts):
        out = sentiment_over_time(posts, "daily")
        assert out["date"].tolist() == ["2024-01-05", "2024-01-20", "2024-02-02", "2024-02-10"]

    def test_counters_only_count_recognized_dated_rows(self, posts):
        out = sentiment_over_time(posts, "daily")
        assert int(out[["positive", "negative", "neutral"]].to_numpy().sum()) == 3

    def test_engagement_sum_covers_all_dated_rows(self, posts):
        for granularity in ("daily", "monthly"):
            out = sentiment_over_time(posts, granularity)
            assert out["total_engagements"].sum() == 22.0

    def test_chronological_not_lexical(self):
        df = posts_from_records([
            {"Date of Tweet": "January 10, 2024", "sentiment text": "positive"},
            {"Date of Tweet": "January 2, 2024", "sentiment text": "negative"},
            {"Date of Tweet": "December 31, 2023", "sentiment text": "neutral"},
        ])
        out = sentiment_over_time(df, "daily")
        assert out["date"].tolist() == ["December 31, 2023", "January 2, 2024", "January 10, 2024"]

    def test_monthly_coarsens_daily(self):
        df = posts_from_records([
            {"Date of Tweet": "2024-03-01", "sentiment text": "positive", "Total Engagements": "1"},
            {"Date of Tweet": "2024-03-31 18:45", "sentiment text": "positive", "Total Engagements": "2"},
            {"Date of Tweet": "2024-04-01", "sentiment text": "negative", "Total Engagements": "4"},
        ])
        assert len(sentiment_over_time(df, "daily")) == 3
        monthly = sentiment_over_time(df, "monthly")
        assert monthly["date"].tolist() == ["2024-03-01", "2024-04-01"]
        assert monthly.loc[0, "positive"] == 2
        assert monthly.loc[0, "total_engagements"] == 3.0

    def test_fare_alias_posts_share_january(self):
        df = posts_from_records([
            {"date": "2024-01-05", "sentiment": "Positive", "engagements": "10", "tags": "Fares"},
            {"date": "2024-01-20", "sentiment": "Negative", "engagements": "5", "tags": "FAIRS"},
        ])
        monthly = sentiment_over_time(df, "monthly")
        assert len(monthly) == 1
        row = monthly.iloc[0]
        assert row["date"] == "2024-01-01"
        assert (row["positive"], row["negative"], row["neutral"]) == (1, 1, 0)
        assert row["total_engagements"] == 15.0

        tags = tag_distribution(df)
        assert tags["tag"].tolist() == ["FARES"]
        assert tags.loc[0, "total"] == 2

    def test_empty_input(self):
        out = sentiment_over_time(posts_from_records([]), "monthly")
        assert out.empty
        assert list(out.columns) == SENTIMENT_BUCKET_COLUMNS

    def test_only_undated_rows(self):
        df = posts_from_records([{"Date of Tweet": "soon", "sentiment text": "positive"}])
        assert sentiment_over_time(df, "daily").empty

    def test_unknown_granularity(self, posts):
        with pytest.raises(ValueError):
            sentiment_over_time(posts, "weekly")

    def test_input_not_mutated(self, posts):
        before = posts.copy()
        sentiment_over_time(posts, "monthly")
        pd.testing.assert_frame_equal(posts, before)


class TestTagDistribution:
    def test_aliases_and_sentinel(self, posts):
        out = tag_distribution(posts)
        assert list(out.columns) == TAG_SUMMARY_COLUMNS
        assert out["tag"].tolist() == ["FARES", "Safety", "Delays"]
        fares = out.iloc[0]
        assert (fares["positive"], fares["negative"], fares["neutral"], fares["total"]) == (1, 1, 0, 2)
        safety = out.iloc[1]
        # neutral + "mixed": total counts both, neutral only one
        assert (safety["neutral"], safety["total"]) == (1, 2)
        assert "OTHERS" not in out["tag"].tolist()

    def test_multi_tag_row_hits_each_bucket(self):
        df = posts_from_records([{"tags": "Fares, OTHERS, Safety", "sentiment text": "negative"}])
        out = tag_distribution(df)
        assert out["tag"].tolist() == ["FARES", "Safety"]
        assert out["negative"].tolist() == [1, 1]

    def test_top_ten_with_stable_ties(self):
        rows = [{"tags": f"T{i}", "sentiment text": "neutral"} for i in range(12)]
        rows += [{"tags": "T11", "sentiment text": "positive"}]
        out = tag_distribution(posts_from_records(rows))
        assert len(out) == 10
        assert out["tag"].tolist() == ["T11"] + [f"T{i}" for i in range(9)]
        assert out["total"].is_monotonic_decreasing

    def test_fewer_than_ten_tags(self, posts):
        assert len(tag_distribution(posts)) == 3

    def test_first_seen_casing_displayed(self):
        df = posts_from_records([{"tags": "safety"}, {"tags": "SAFETY"}])
        out = tag_distribution(df)
        assert out["tag"].tolist() == ["safety"]
        assert out.loc[0, "total"] == 2

    def test_no_tags(self):
        out = tag_distribution(posts_from_records([{"tags": "OTHERS"}, {"tags": " , "}]))
        assert out.empty
        assert list(out.columns) == TAG_SUMMARY_COLUMNS

    def test_round_trips_through_dataclasses(self, posts):
        out = tag_distribution(posts)
        rows = frame_to_records(out, TagSummary)
        assert rows[0] == TagSummary("FARES", 1, 1, 0, 2)
        pd.testing.assert_frame_equal(records_to_frame(rows, TAG_SUMMARY_COLUMNS), out)

    def test_invalid_summary_rejected(self):
        with pytest.raises(ValueError):
            TagSummary("FARES", positive=3, total=2)


class TestSummaries:
    def test_totals_treat_unknown_as_neutral(self, posts):
        totals = summary_totals(posts)
        assert totals == {
            "posts": 6, "engagements": 126.0, "replies": 15.0,
            "positive": 2, "negative": 2, "neutral": 2,
        }

    def test_shares(self, posts):
        shares = sentiment_shares(summary_totals(posts))
        assert shares == {"positive": 33.3, "negative": 33.3, "neutral": 33.3}

    def test_shares_guard_empty(self):
        shares = sentiment_shares(summary_totals(posts_from_records([])))
        assert shares == {"positive": 0.0, "negative": 0.0, "neutral": 0.0}

    def test_summary_text(self, posts):
        assert sentiment_summary_text(summary_totals(posts)) == "Positive: 2, Negative: 2, Neutral: 2"
        assert top_tags_text(tag_distribution(posts), limit=2) == "FARES (2), Safety (2)"
