# src/brt_pulse/report.py
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

import pandas as pd

logger = logging.getLogger(__name__)

LLMCall = Callable[[str], str]

NO_REPORTS = "No specific reports found for this focus area in the current dataset."
UNAVAILABLE = "Analysis temporarily unavailable."

SECTION_CONTEXT_ROWS = 20
FULL_REPORT_CONTEXT_ROWS = 40


@dataclass(frozen=True)
class ReportSection:
    id: str
    label: str
    instruction: str


REPORT_SECTIONS: List[ReportSection] = [
    ReportSection(
        "hotspots", "Transit Hotspots",
        "Summarize specific locations, terminals, or stations experiencing bottlenecks, "
        "overcrowding, or high traffic. Be succinct.",
    ),
    ReportSection(
        "incidents", "Critical Issues",
        "Synthesize and summarize specific unique accidents, safety breaches, or recurring "
        "mechanical failures into a single analytical paragraph. Mention specific spots or "
        "dates if found.",
    ),
    ReportSection(
        "suggestions", "Actionable Suggestions",
        "Identify and list specific passenger requests for new routes, facility upgrades, or "
        "service changes. Focus on \"should\", \"could\", and \"please\" statements.",
    ),
]


# ----------------------------
# Context selection
# ----------------------------
def _prep_post(s: str) -> str:
    s = (s or "").strip()
    s = re.sub(r"http\S+|www\.\S+", "", s)     # drop urls
    s = re.sub(r"\s+", " ", s)
    return s.strip()


def rank_context_rows(df: pd.DataFrame, limit: int = SECTION_CONTEXT_ROWS) -> pd.DataFrame:
    """Most-engaged posts first; ties keep input order."""
    return df.sort_values("total_engagements", ascending=False, kind="stable").head(limit)


def context_text(rows: pd.DataFrame) -> str:
    posts = [p for p in (_prep_post(t) for t in rows["text"].astype(str)) if p]
    return "\n".join(f"- {p}" for p in posts)


# ----------------------------
# Prompting + LLM I/O
# ----------------------------
PROMPT_HEADER = """You are a Lagos Transit Intelligence Analyst.
You are given the most engaged passenger posts about the Lagos BRT network."""

SECTION_RULES = f"""Rules:
1. Provide ONLY the analysis paragraph.
2. DO NOT mention statistics.
3. DO NOT use markdown formatting like stars or dashes.
4. Be succinct and factual.
5. If no specific information is found, return exactly: "{NO_REPORTS}"
"""


def build_section_prompt(section: ReportSection, context: str, sentiment_summary: str = "", top_tags: str = "") -> str:
    overview = ""
    if sentiment_summary or top_tags:
        overview = f"\nDataset overview (for orientation only):\n- Sentiment: {sentiment_summary}\n- Top tags: {top_tags}\n"
    return (
        f"{PROMPT_HEADER}\n"
        f"Task: Provide a BRIEF (one paragraph) and SPECIFIC analysis for the category: {section.label}.\n"
        f"Instruction: {section.instruction}\n\n"
        f"{SECTION_RULES}{overview}\n"
        f"Data Context (Top Reports for this Category):\n{context}"
    )


def build_full_report_prompt(context: str, sections: List[ReportSection] = REPORT_SECTIONS) -> str:
    categories = "\n".join(f"- {s.label} (ID: {s.id}): {s.instruction}" for s in sections)
    return f"""{PROMPT_HEADER}
Task: Provide a BRIEF (one paragraph) and SPECIFIC analysis for {len(sections)} key transit categories based on the provided data.

Categories to analyze:
{categories}

Rules:
1. Provide ONLY one paragraph per category.
2. DO NOT mention statistics (e.g., "50% of users").
3. DO NOT use markdown formatting (no stars, no bold).
4. Be succinct, professional, and factual.
5. If no specific information is found for a category, use: "{NO_REPORTS}"
6. Return a valid JSON object where keys are the Category IDs and values are the analysis strings.

Data Context (Top Reports):
{context}"""


def clean_model_text(text: str) -> str:
    text = (text or "").strip()
    text = text.replace("*", "")
    text = re.sub(r"^- ", "", text, flags=re.M)
    text = re.sub(r"^Analysis:", "", text, flags=re.I)
    return text.strip()


def load_json_object(text: str) -> Dict[str, Any]:
    # Try exact parse; if it fails, try the first {...} block (models like code fences).
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        m = re.search(r"\{.*\}", text or "", re.S)
        if not m:
            raise
        parsed = json.loads(m.group(0))
    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


# ----------------------------
# Public entrypoints
# ----------------------------
def generate_report_section(
    section: ReportSection,
    df: pd.DataFrame,
    sentiment_summary: str,
    top_tags: str,
    *,
    llm_call_fn: LLMCall,
    limit: int = SECTION_CONTEXT_ROWS,
) -> str:
    """
    One paragraph for one report section from the top-``limit`` posts by engagement.
    Never raises: no usable posts -> NO_REPORTS, model failure -> UNAVAILABLE.
    """
    context = context_text(rank_context_rows(df, limit))
    if not context:
        return NO_REPORTS

    prompt = build_section_prompt(section, context, sentiment_summary, top_tags)
    try:
        raw = llm_call_fn(prompt)
    except Exception:
        logger.exception("Error generating section %s", section.id)
        return UNAVAILABLE
    return clean_model_text(raw) or NO_REPORTS


def generate_full_report(
    df: pd.DataFrame,
    *,
    llm_call_fn: LLMCall,
    sections: List[ReportSection] = REPORT_SECTIONS,
    limit: int = FULL_REPORT_CONTEXT_ROWS,
) -> Dict[str, str]:
    """
    All sections in a single JSON-mode call. Sections missing from the reply fall
    back to UNAVAILABLE; a failed call or unparseable reply is logged and re-raised.
    """
    context = context_text(rank_context_rows(df, limit))
    if not context:
        return {s.id: NO_REPORTS for s in sections}

    try:
        parsed = load_json_object(llm_call_fn(build_full_report_prompt(context, sections)))
    except Exception:
        logger.exception("Error generating full report")
        raise

    out = {}
    for s in sections:
        content = parsed.get(s.id) or parsed.get(s.label) or UNAVAILABLE
        out[s.id] = clean_model_text(str(content)) or UNAVAILABLE
    return out
