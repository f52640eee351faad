from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from flask import current_app

from ..utils.error_messages import ErrorMessages as EM
from .ai import GoogleAIClient, GoogleAIClientError
from .errors import RemoteServiceError

logger = logging.getLogger(__name__)

_PROMPT_TEMPLATE = """You are an expert pharmacy manager. You will receive information about a drug, including its name, current stock level, and expiry date. Based on this information, suggest an adjustment to the stock level that minimizes waste and keeps the hospital supplied.

Drug Name: {drug_name}
Current Stock: {current_stock}
Expiry Date: {expiry_date}

If the expiry date is near, suggest reducing the stock level. If the stock level is low and the expiry date is far, suggest maintaining or increasing it. If the expiry date is far and the current stock is appropriate, suggest maintaining the current stock. Always give a reason.

Answer with a single JSON object and nothing else, using these keys:
  "adjustmentSuggestion": string, required
  "suggestedQuantity": number, optional, the quantity to adjust by
  "reason": string, optional
"""

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


@dataclass(slots=True)
class StockSuggestion:
    adjustment_suggestion: str
    suggested_quantity: Optional[float] = None
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'adjustmentSuggestion': self.adjustment_suggestion,
            'suggestedQuantity': self.suggested_quantity,
            'reason': self.reason,
        }


class StockSuggestionService:
    """Asks Gemini how a lot's stock level should be adjusted. Read-only, never retried."""

    def __init__(self, client: Optional[GoogleAIClient] = None):
        if not current_app.config.get("FEATURE_STOCK_SUGGESTIONS", False):
            raise RemoteServiceError(EM.SUGGESTION_DISABLED)
        if client is None:
            try:
                client = GoogleAIClient.from_app()
            except GoogleAIClientError as exc:
                raise RemoteServiceError(EM.SUGGESTION_NOT_CONFIGURED) from exc
        self.client = client
        self.model_name = current_app.config.get("GOOGLE_AI_DEFAULT_MODEL")

    @staticmethod
    def build_prompt(drug_name: str, current_stock: int, expiry_date: str) -> str:
        return _PROMPT_TEMPLATE.format(
            drug_name=drug_name,
            current_stock=current_stock,
            expiry_date=expiry_date or "N/A",
        )

    def suggest(self, drug_name: str, current_stock: int, expiry_date: str) -> StockSuggestion:
        prompt = self.build_prompt(drug_name, current_stock, expiry_date)
        try:
            result = self.client.generate_content(
                contents=[{"role": "user", "parts": [{"text": prompt}]}],
                model=self.model_name,
                generation_config={
                    "temperature": 0.2,
                    "max_output_tokens": 512,
                    "response_mime_type": "application/json",
                },
            )
        except GoogleAIClientError as exc:
            logger.warning("Stock suggestion request failed for %s", drug_name, exc_info=True)
            raise RemoteServiceError(EM.SUGGESTION_FAILED) from exc

        suggestion = parse_suggestion(result.text)
        logger.info("Stock suggestion for %s: %s", drug_name, suggestion.adjustment_suggestion)
        return suggestion


def parse_suggestion(text: str) -> StockSuggestion:
    """Parse the model's JSON answer; anything unusable is a remote failure."""
    cleaned = _FENCE_RE.sub("", (text or "").strip())
    try:
        payload: Any = json.loads(cleaned)
    except ValueError as exc:
        logger.warning("Stock suggestion was not JSON: %r", cleaned[:200])
        raise RemoteServiceError(EM.SUGGESTION_FAILED) from exc

    if not isinstance(payload, dict):
        raise RemoteServiceError(EM.SUGGESTION_FAILED)
    adjustment = payload.get("adjustmentSuggestion")
    if not isinstance(adjustment, str) or not adjustment.strip():
        logger.warning("Stock suggestion missing adjustmentSuggestion: %r", payload)
        raise RemoteServiceError(EM.SUGGESTION_FAILED)

    quantity = payload.get("suggestedQuantity")
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
        quantity = None
    reason = payload.get("reason")
    if not isinstance(reason, str) or not reason.strip():
        reason = None

    return StockSuggestion(
        adjustment_suggestion=adjustment.strip(),
        suggested_quantity=quantity,
        reason=reason.strip() if reason else None,
    )
