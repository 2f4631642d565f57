# appstore_charts/llm.py
"""
Text generation backend: any OpenAI-compatible chat completions endpoint.
"""
from typing import Dict, List

from openai import OpenAI

from appstore_charts import config


def get_client() -> OpenAI:
    return OpenAI(api_key=config.LLM_API_KEY, base_url=config.LLM_BASE_URL)


def generate_text(messages: List[Dict[str, str]], temperature: float = 0.3) -> str:
    """Send role-tagged messages and return the generated text ('' if none)."""
    response = get_client().chat.completions.create(
        model=config.LLM_MODEL,
        messages=messages,
        temperature=temperature,
    )
    return response.choices[0].message.content or ""
