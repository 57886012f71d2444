"""
AI insight generation for journal entries.
Uses the DeepSeek chat-completions API (OpenAI-compatible wire format).

Every public generator is total: transport failures, non-2xx responses and
replies that do not match the expected JSON shape are logged and replaced by
a fixed fallback object, so callers never see an exception from here.
"""
import os
import json
import time
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

DEEPSEEK_API_URL = os.getenv("DEEPSEEK_API_URL", "https://api.deepseek.com/v1/chat/completions")
DEEPSEEK_MODEL = os.getenv("DEEPSEEK_MODEL", "deepseek-chat")
DEEPSEEK_TIMEOUT = float(os.getenv("DEEPSEEK_TIMEOUT", "30"))
DEEPSEEK_MAX_ATTEMPTS = int(os.getenv("DEEPSEEK_MAX_ATTEMPTS", "2"))

NOT_INFORMED = "not informed"

DEPTHS = ["shallow", "medium", "deep"]


class CompletionError(Exception):
    """The completion endpoint could not produce usable text."""


class InsightParseError(Exception):
    """The completion text did not contain an object of the expected shape."""


@dataclass
class ContextData:
    """Rolling context sent alongside the entry being analysed."""
    recent_entries: List[Any] = field(default_factory=list)
    avg_mood: float = 5.0
    avg_sleep: float = 7.0
    avg_energy: float = 5.0
    frequent_tags: List[str] = field(default_factory=list)


# =============================================================================
# Response shapes and fallbacks
# =============================================================================

STRING_LIST = "string_list"

DAILY_SCHEMA = {
    "summary": str,
    "insights": STRING_LIST,
    "tomorrowPlan": STRING_LIST,
    "emotions": STRING_LIST,
}

WEEKLY_SCHEMA = {
    "title": str,
    "narrative": str,
    "highlights": STRING_LIST,
    "lowlights": STRING_LIST,
    "suggestions": STRING_LIST,
}

SEARCH_SCHEMA = {
    "results": list,
    "summary": str,
}


def daily_fallback() -> Dict[str, Any]:
    return {
        "summary": (
            "Insights could not be generated right now. "
            "Check your API key in the settings."
        ),
        "insights": ["Configure your DeepSeek API key to receive personalized insights."],
        "tomorrowPlan": ["Get some good rest", "Stay hydrated", "Save a moment for yourself"],
        "emotions": [],
    }


def weekly_fallback() -> Dict[str, Any]:
    return {
        "title": "Week in Review",
        "narrative": "Configure your DeepSeek API key to receive detailed weekly reviews.",
        "highlights": [],
        "lowlights": [],
        "suggestions": ["Set up the AI integration in the settings"],
    }


def search_fallback() -> Dict[str, Any]:
    return {
        "results": [],
        "summary": "Configure your API key to use smart search.",
    }


# =============================================================================
# Parsing
# =============================================================================

def extract_json_object(text: Optional[str]) -> Dict[str, Any]:
    """
    Return the first balanced {...} block in `text`, decoded.

    Braces inside JSON string literals are ignored while matching, so prose
    around the object (or markdown fences) is tolerated.
    """
    if not text:
        raise InsightParseError("empty completion")

    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for pos in range(start, len(text)):
            char = text[pos]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    candidate = text[start:pos + 1]
                    try:
                        parsed = json.loads(candidate)
                    except ValueError:
                        break
                    if isinstance(parsed, dict):
                        return parsed
                    break
        start = text.find("{", start + 1)

    raise InsightParseError("no JSON object found in completion")


def _matches(value: Any, expected: Any) -> bool:
    if expected is STRING_LIST:
        return isinstance(value, list) and all(isinstance(item, str) for item in value)
    return isinstance(value, expected)


def validate_shape(payload: Dict[str, Any], schema: Dict[str, Any]) -> Dict[str, Any]:
    """Check required fields and their types. Returns the payload unchanged."""
    for key, expected in schema.items():
        if key not in payload:
            raise InsightParseError(f"missing field '{key}'")
        if not _matches(payload[key], expected):
            raise InsightParseError(f"field '{key}' has the wrong type")
    return payload


def validate_search_results(payload: Dict[str, Any]) -> Dict[str, Any]:
    validate_shape(payload, SEARCH_SCHEMA)
    for item in payload["results"]:
        if not isinstance(item, dict):
            raise InsightParseError("search result is not an object")
        entry_id = item.get("entry_id")
        if isinstance(entry_id, bool) or not isinstance(entry_id, int):
            raise InsightParseError("search result entry_id must be an integer")
        if not isinstance(item.get("relevance"), str):
            raise InsightParseError("search result relevance must be a string")
    return payload


# =============================================================================
# Transport
# =============================================================================

class DeepSeekClient:
    """Thin wrapper over the chat-completions endpoint."""

    def __init__(
        self,
        api_key: str,
        api_url: str = None,
        model: str = None,
        timeout: float = None,
        max_attempts: int = None,
    ):
        if not api_key:
            raise CompletionError("API key not configured")
        self.api_key = api_key
        self.api_url = api_url or DEEPSEEK_API_URL
        self.model = model or DEEPSEEK_MODEL
        self.timeout = timeout if timeout is not None else DEEPSEEK_TIMEOUT
        self.max_attempts = max(1, max_attempts or DEEPSEEK_MAX_ATTEMPTS)

    def _post(self, payload: Dict[str, Any]) -> requests.Response:
        """POST with basic retry on transport errors and 5xx responses."""
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        last_exc = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                response = requests.post(
                    self.api_url, headers=headers, json=payload, timeout=self.timeout
                )
            except requests.exceptions.RequestException as exc:
                last_exc = exc
                logger.warning("DeepSeek request failed (attempt %d): %s", attempt, exc)
            else:
                if response.status_code < 500 or attempt == self.max_attempts:
                    return response
                logger.warning(
                    "DeepSeek returned %d (attempt %d)", response.status_code, attempt
                )
            if attempt < self.max_attempts:
                time.sleep(0.2 * attempt)
        raise CompletionError(f"DeepSeek unreachable: {last_exc}")

    def complete(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 1500,
    ) -> str:
        """Return the text of the first choice. Raises CompletionError."""
        response = self._post({
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })

        if not response.ok:
            raise CompletionError(
                f"DeepSeek API error: {response.status_code} - {response.text[:200]}"
            )

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise CompletionError(f"Unexpected DeepSeek response body: {exc}")

        if not content:
            raise CompletionError("Empty response from DeepSeek")
        return content


def check_api_key(api_key: str) -> Tuple[bool, str]:
    """Send a minimal completion to see whether the key is accepted."""
    try:
        client = DeepSeekClient(api_key, max_attempts=1)
        response = client._post({
            "model": client.model,
            "messages": [{"role": "user", "content": "Hello"}],
            "max_tokens": 10,
        })
    except CompletionError as exc:
        logger.warning("API key check failed: %s", exc)
        return False, "Could not reach the DeepSeek API"

    if response.ok:
        return True, "API key is valid!"

    try:
        message = response.json().get("error", {}).get("message")
    except (ValueError, AttributeError):
        message = None
    return False, message or "Invalid API key"


# =============================================================================
# Prompts
# =============================================================================

BASE_SYSTEM_PROMPT = """You are LifeLog AI, a warm and empathetic personal assistant that helps people understand their lives better through journal analysis.

Your role is to:
- Be welcoming and non-judgmental
- Offer personalized insights grounded in the user's real data
- Turn observations into practical, actionable steps
- Respect the user's privacy and vulnerability

IMPORTANT: Always answer with valid JSON."""

DEPTH_INSTRUCTIONS = {
    "shallow": """
Mode: BRIEF
- Give short summaries (2-3 sentences)
- Suggest 1-2 simple actions
- Be direct and to the point""",
    "medium": """
Mode: BALANCED
- Give moderate analysis (4-6 sentences)
- Identify 2-3 relevant patterns
- Suggest 2-3 practical actions
- Include emotional observations when relevant""",
    "deep": """
Mode: DEEP
- Give detailed, reflective analysis
- Explore connections between different areas of life from multiple angles
- Ask questions that encourage self-knowledge
- Suggest multiple actions at different effort levels
- Include observations about long-term patterns""",
}

SEARCH_SYSTEM_PROMPT = """You are a smart search assistant for a personal journal.
Analyse the entries and find the ones most relevant to the user's question.
Always answer with valid JSON."""


def build_system_prompt(depth: str) -> str:
    """Shared persona plus the tier selected by `depth` (unknown -> medium)."""
    if depth not in DEPTHS:
        depth = "medium"
    return BASE_SYSTEM_PROMPT + DEPTH_INSTRUCTIONS[depth]


def _value(value: Any) -> Any:
    if value is None or value == "":
        return NOT_INFORMED
    return value


def _entry_date(entry: Any) -> str:
    value = entry.entry_date
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


def build_daily_prompt(entry: Any, context: ContextData) -> str:
    return f"""Analyse this journal entry and generate personalized insights.

TODAY'S ENTRY ({_entry_date(entry)}):
- Content: {_value(entry.content)}
- Mood: {_value(entry.mood)}/10
- Energy: {_value(entry.energy)}/10
- Sleep: {_value(entry.sleep_hours)}h (quality: {_value(entry.sleep_quality)}/10)
- Stress: {_value(entry.stress)}/10
- Focus: {_value(entry.focus)}/10
- Physical discomfort: {_value(entry.physical_discomfort)}/10
- Highlight: {_value(entry.highlight)}

CONTEXT FROM RECENT DAYS:
- Average mood: {context.avg_mood:.1f}/10
- Average sleep: {context.avg_sleep:.1f}h
- Average energy: {context.avg_energy:.1f}/10
- Frequent tags: {', '.join(context.frequent_tags) or 'none'}

Answer ONLY with valid JSON in this format:
{{
  "summary": "Summary of the day in 2-5 sentences",
  "insights": ["insight 1", "insight 2", "insight 3"],
  "tomorrowPlan": ["task 1", "task 2", "self-care"],
  "emotions": ["emotion1", "emotion2"]
}}"""


def build_weekly_prompt(entries: List[Any], context: ContextData) -> str:
    lines = []
    for entry in entries:
        mood = entry.mood if entry.mood is not None else "?"
        energy = entry.energy if entry.energy is not None else "?"
        sleep = entry.sleep_hours if entry.sleep_hours is not None else "?"
        lines.append(f"{_entry_date(entry)}: Mood {mood}/10, Energy {energy}/10, Sleep {sleep}h")

    return f"""Write a weekly review based on these entries:

ENTRIES THIS WEEK:
{chr(10).join(lines)}

AVERAGES:
- Mood: {context.avg_mood:.1f}/10
- Sleep: {context.avg_sleep:.1f}h
- Energy: {context.avg_energy:.1f}/10

Answer ONLY with valid JSON in this format:
{{
  "title": "A creative title for the week",
  "narrative": "Short narrative of the week in 3-5 sentences",
  "highlights": ["high point 1", "high point 2"],
  "lowlights": ["point of attention 1"],
  "suggestions": ["suggestion for next week 1", "suggestion 2"]
}}"""


def build_search_prompt(query: str, entries: List[Any]) -> str:
    entries_data = [
        {
            "id": entry.id,
            "date": _entry_date(entry),
            "content": (entry.content or "")[:200] or None,
            "mood": entry.mood,
            "highlight": entry.highlight,
        }
        for entry in entries
    ]
    return f"""User question: "{query}"

Available entries:
{json.dumps(entries_data, indent=2, ensure_ascii=False)}

Answer with JSON:
{{
  "results": [{{"entry_id": 1, "relevance": "Why this entry is relevant"}}],
  "summary": "Summary of what was found"
}}"""


# =============================================================================
# Generators
# =============================================================================

def _generate(
    api_key: str,
    build_messages,
    temperature: float,
    max_tokens: int,
    validator,
    fallback,
    label: str,
) -> Dict[str, Any]:
    """Build prompts, invoke, extract, validate; any failure yields `fallback()`."""
    try:
        system_prompt, user_prompt = build_messages()
        client = DeepSeekClient(api_key)
        text = client.complete(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return validator(extract_json_object(text))
    except (CompletionError, InsightParseError) as exc:
        logger.warning("DeepSeek %s failed, using fallback: %s", label, exc)
    except Exception:
        logger.exception("Unexpected error during DeepSeek %s", label)
    return fallback()


def generate_daily_insights(
    api_key: str,
    depth: str,
    entry: Any,
    context: ContextData,
) -> Dict[str, Any]:
    """
    Generate the daily insight for one entry.

    Returns:
        Dict with summary, insights, tomorrowPlan and emotions, either as
        returned by the model or the fixed fallback.
    """
    return _generate(
        api_key,
        lambda: (build_system_prompt(depth), build_daily_prompt(entry, context)),
        temperature=0.7,
        max_tokens=1500,
        validator=lambda payload: validate_shape(payload, DAILY_SCHEMA),
        fallback=daily_fallback,
        label="daily insights",
    )


def generate_weekly_summary(
    api_key: str,
    depth: str,
    entries: List[Any],
    context: ContextData,
) -> Dict[str, Any]:
    """Generate a weekly review: title, narrative, highlights, lowlights, suggestions."""
    return _generate(
        api_key,
        lambda: (build_system_prompt(depth), build_weekly_prompt(entries, context)),
        temperature=0.7,
        max_tokens=2000,
        validator=lambda payload: validate_shape(payload, WEEKLY_SCHEMA),
        fallback=weekly_fallback,
        label="weekly summary",
    )


def semantic_search(api_key: str, query: str, entries: List[Any]) -> Dict[str, Any]:
    """Rank entries against a free-text question. Returns results[] and summary."""
    return _generate(
        api_key,
        lambda: (SEARCH_SYSTEM_PROMPT, build_search_prompt(query, entries)),
        temperature=0.3,
        max_tokens=1000,
        validator=validate_search_results,
        fallback=search_fallback,
        label="search",
    )
