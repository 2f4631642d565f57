# appstore_charts/analysis.py
"""
LLM-written summaries of ranking data: market trends for one day, and why one
app ranks differently across countries.
"""
import json
import logging
from typing import Callable, Dict, List, Optional, Sequence

from openai import OpenAIError

from appstore_charts import llm
from appstore_charts.db import ChartStore
from appstore_charts.queries import app_rankings_on_date, get_app, list_rankings
from appstore_charts.rankings import (
    CategoryType, Country, RankingType, category_name,
)

logger = logging.getLogger(__name__)

Generate = Callable[[List[Dict[str, str]]], str]

NO_DATA = "No ranking data available for the selected criteria."
UNAVAILABLE = "Unable to generate analysis at this time."

TREND_SYSTEM_PROMPT = (
    "You are an app market analyst specialising in App Store trends across countries. "
    "Give concise, data-driven insights."
)
COMPARISON_SYSTEM_PROMPT = (
    "You are an expert app market analyst specialising in cross-cultural app performance. "
    "Explain ranking differences using market characteristics."
)


def _generate(generate: Optional[Generate], messages: List[Dict[str, str]]) -> str:
    generate = generate or llm.generate_text
    try:
        return generate(messages) or "Analysis unavailable."
    except OpenAIError as e:
        logger.error("LLM analysis failed: %s", e)
        return UNAVAILABLE


def summarize_trends(
    store: ChartStore,
    countries: Sequence[Country],
    ranking_type: RankingType,
    category_type: CategoryType,
    rank_date: str,
    generate: Optional[Generate] = None,
) -> str:
    rows, _ = list_rankings(store, countries, ranking_type, category_type, rank_date, limit=20)
    if not rows:
        return NO_DATA

    data = [
        {
            "rank": r["rank"],
            "country": Country(r["country"]).display_name,
            "app_name": r["name"],
            "category": category_name(r["category_id"]) or "Unknown",
            "artist_name": r["artist_name"],
        }
        for r in rows
    ]
    country_names = ", ".join(Country(c).display_name for c in countries)
    prompt = (
        f"Below is the App Store \"{RankingType(ranking_type).display_name}\" ranking "
        f"({CategoryType(category_type).display_name}) for {country_names} on {rank_date}.\n\n"
        f"Ranking data:\n{json.dumps(data, indent=2, ensure_ascii=False)}\n\n"
        "Please analyse:\n"
        "1. What the top-ranked apps have in common\n"
        "2. Notable patterns or trends\n"
        "3. Interesting differences in market preferences between the countries\n\n"
        "Keep it concise, around 150-200 words."
    )
    return _generate(generate, [
        {"role": "system", "content": TREND_SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ])


def compare_countries(
    store: ChartStore,
    app_id: int,
    countries: Sequence[Country],
    ranking_type: RankingType,
    category_type: CategoryType,
    rank_date: str,
    generate: Optional[Generate] = None,
) -> str:
    app = get_app(store, app_id)
    if not app:
        return "App not found."

    ranks = [
        {"country": Country(r["country"]).display_name, "rank": r["rank"]}
        for r in app_rankings_on_date(store, app_id, countries, ranking_type, category_type, rank_date)
    ]
    prompt = (
        f"Analyze why the app \"{app['name']}\" by {app['artist_name']} has different rankings "
        "across countries.\n\n"
        "App details:\n"
        f"- Name: {app['name']}\n"
        f"- Developer: {app['artist_name']}\n"
        f"- Category: {app['category_name'] or 'Unknown'}\n"
        f"- Description: {app['summary'] or 'Not available'}\n\n"
        f"Rankings by country ({RankingType(ranking_type).display_name}, {rank_date}):\n"
        f"{json.dumps(ranks, indent=2, ensure_ascii=False)}\n\n"
        "Please analyze:\n"
        "1. Why this app might perform differently in each market\n"
        "2. Cultural or market factors that could explain the differences\n"
        "3. Opportunities or challenges for this app in each market\n\n"
        "Keep the analysis concise, around 200-300 words."
    )
    return _generate(generate, [
        {"role": "system", "content": COMPARISON_SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ])
