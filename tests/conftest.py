"""Shared fixtures: a small export-shaped sample of BRT posts."""

import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest

from brt_pulse.data_prep import posts_from_records

EXPORT_HEADERS = [
    "Date of Tweet", "sentiment text", "Total Engagements", "Number of Replies",
    "tags", "merged_label", "merged_description", "cleaned tweet", "tweet",
]


def export_row(date, sentiment, engagements, replies, tags, label="", description="", cleaned="", tweet=""):
    return dict(zip(EXPORT_HEADERS, [date, sentiment, engagements, replies, tags, label, description, cleaned, tweet]))


def create_sample_rows():
    """Six posts covering aliases, sentinels, junk counters and bad dates."""
    return [
        export_row("2024-01-05", "Positive", "10", "2", "Fares",
                   "Fare Complaints", "Posts about ticket prices", "Fares went up again at Ikorodu terminal"),
        export_row("2024-01-20", "Negative", "5", "1", "FAIRS",
                   "Fare Complaints", "Ticket prices (duplicate)", "Why is the fair so high on the Oshodi route"),
        export_row("2024-02-02", "neutral", "n/a", "", "Safety, OTHERS",
                   "Noise", "Unclustered posts", "", "Bus broke down near Obalende"),
        export_row("2024-02-10", "mixed", "7", "3", "Safety, Delays",
                   "Delays", "Waiting times", "Waited 2 hours at CMS"),
        export_row("not a date", "Positive", "100", "9", "OTHERS",
                   "Noise", "Unclustered posts", "Please add more buses to Ajah"),
        export_row("", "negative", "4", "0", "", "", "", "Driver was rude"),
    ]


@pytest.fixture
def sample_rows():
    return create_sample_rows()


@pytest.fixture
def posts(sample_rows):
    return posts_from_records(sample_rows)


@pytest.fixture
def sample_csv(tmp_path, sample_rows):
    path = tmp_path / "lean_df.csv"
    pd.DataFrame(sample_rows).to_csv(path, index=False)
    return path


class FakeLLM:
    """Records prompts and replays a canned reply (or raises it)."""

    def __init__(self, reply="Congestion reported at Oshodi and CMS."):
        self.reply = reply
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


@pytest.fixture
def fake_llm():
    return FakeLLM()
