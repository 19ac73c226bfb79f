from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from domain.models import InsightType
from domain.schemas import InsightEntry, InsightsContext
from infrastructure.llm.llm_client import LLMClient

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a creative financial advisor with expertise in personal finance. "
    "Provide varied, insightful, and personalized financial advice based on the data provided."
)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


class InsightsGenerationError(RuntimeError):
    pass


class AdvisoryGenerator(ABC):
    """Produces advisory insight entries from a snapshot summary."""

    @abstractmethod
    def generate(self, context: InsightsContext) -> list[InsightEntry]:
        raise NotImplementedError


class InsightsLLM(AdvisoryGenerator):
    """Builds insight prompts and parses the JSON array the model returns."""

    def __init__(self, llm_client: LLMClient):
        self._llm = llm_client

    def build_prompt(self, context: InsightsContext) -> str:
        prompt_payload: Dict[str, Any] = {
            "task": "Analyze the financial data and provide three specific, personalized insights.",
            "financial_overview": context.profile.model_dump(mode="json"),
            "recent_transactions": [t.model_dump(mode="json") for t in context.recent_transactions],
            "budgets": [b.model_dump(mode="json") for b in context.budgets],
            "savings_goals": [g.model_dump(mode="json") for g in context.goals],
            "insights_required": {
                InsightType.SPENDING.value: "A specific pattern, trend, or anomaly in recent spending.",
                InsightType.SAVING.value: "One specific, non-obvious saving opportunity based on spending habits.",
                InsightType.UPCOMING.value: "A financial tip relevant to the current goals and budgets.",
            },
            "output_contract": {
                "type": "array",
                "items": InsightEntry.model_json_schema(),
                "minItems": 3,
                "maxItems": 3,
            },
            "rules": [
                "Return a JSON array only.",
                "Use each type exactly once: spending, saving, upcoming.",
                "Keep each message under 150 characters and actionable.",
            ],
        }
        return json.dumps(prompt_payload, indent=2, default=str)

    def generate(self, context: InsightsContext) -> list[InsightEntry]:
        logger.info(
            "InsightsLLM generate start transactions=%d budgets=%d goals=%d",
            len(context.recent_transactions),
            len(context.budgets),
            len(context.goals),
        )
        raw = self._llm.complete(self.build_prompt(context), system=SYSTEM_PROMPT).strip()
        if not raw:
            raise InsightsGenerationError("LLM returned an empty response")
        entries = self.parse_response(raw)
        logger.info("InsightsLLM accepted entries=%d", len(entries))
        return entries

    def parse_response(self, raw: str) -> List[InsightEntry]:
        text = _FENCE_RE.sub("", raw.strip())
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            raise InsightsGenerationError(f"LLM response is not valid JSON: {exc}") from exc
        if not isinstance(parsed, list):
            raise InsightsGenerationError("LLM response is not a JSON array")

        entries: List[InsightEntry] = []
        for item in parsed:
            if not isinstance(item, dict):
                continue
            entries.append(
                InsightEntry(
                    type=str(item.get("type") or "unknown"),
                    title=str(item.get("title") or "Insight"),
                    message=str(item.get("message") or "No insight available"),
                )
            )
        return entries
