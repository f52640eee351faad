"""Thin wrapper around google-generativeai so the rest of the app has a single entrypoint."""

from __future__ import annotations
import logging

import threading
from dataclasses import dataclass
from typing import Any, Dict, Mapping, MutableMapping, Optional, Sequence

import google.generativeai as genai
from flask import current_app

logger = logging.getLogger(__name__)


class GoogleAIClientError(RuntimeError):
    """Raised when the Google AI client cannot fulfil a request."""


@dataclass(slots=True)
class GoogleAIResult:
    """Normalized subset of the Gemini response we care about."""

    text: str
    raw: Any
    finish_reason: str | None = None
    usage_metadata: Mapping[str, Any] | None = None


class GoogleAIClient:
    """Centralized Gemini client configured from Flask settings."""

    _configure_lock = threading.Lock()
    _configured_key: str | None = None

    def __init__(
        self,
        api_key: str,
        *,
        default_model: str = "gemini-1.5-flash",
        request_timeout: int = 30,
    ) -> None:
        if not api_key:
            raise GoogleAIClientError("GOOGLE_AI_API_KEY is not configured.")

        self._api_key = api_key
        self._default_model = default_model or "gemini-1.5-flash"
        self._request_timeout = request_timeout
        self._models: Dict[str, genai.GenerativeModel] = {}
        self._ensure_global_configuration()

    @classmethod
    def from_app(cls) -> "GoogleAIClient":
        """Factory using the current Flask config."""
        cfg = current_app.config
        return cls(
            api_key=cfg.get("GOOGLE_AI_API_KEY"),
            default_model=cfg.get("GOOGLE_AI_DEFAULT_MODEL") or "gemini-1.5-flash",
            request_timeout=int(cfg.get("SUGGESTION_REQUEST_TIMEOUT_SECONDS", 30)),
        )

    def _ensure_global_configuration(self) -> None:
        # genai.configure is process-global; reconfigure only when the key changes.
        if self.__class__._configured_key != self._api_key:
            with self.__class__._configure_lock:
                if self.__class__._configured_key != self._api_key:
                    genai.configure(api_key=self._api_key)
                    self.__class__._configured_key = self._api_key

    def _get_model(self, model_name: Optional[str] = None) -> genai.GenerativeModel:
        name = model_name or self._default_model
        if not name:
            raise GoogleAIClientError("No Gemini model name provided.")

        model = self._models.get(name)
        if model is None:
            model = genai.GenerativeModel(model_name=name)
            self._models[name] = model
        return model

    def generate_content(
        self,
        *,
        contents: Sequence[Mapping[str, Any]],
        model: Optional[str] = None,
        generation_config: Optional[Mapping[str, Any]] = None,
    ) -> GoogleAIResult:
        """Call Gemini and normalize the response."""
        if not contents:
            raise GoogleAIClientError("Gemini requests require at least one content block.")

        payload: MutableMapping[str, Any] = {
            "contents": list(contents),
            "generation_config": generation_config,
        }
        payload = {key: value for key, value in payload.items() if value is not None}

        model_instance = self._get_model(model)
        try:
            response = model_instance.generate_content(
                **payload,
                request_options={"timeout": self._request_timeout},
            )
        except Exception as exc:  # pragma: no cover - network errors
            raise GoogleAIClientError(f"Gemini request failed: {exc}") from exc

        return GoogleAIResult(
            text=_first_text(response),
            raw=response,
            finish_reason=_finish_reason(response),
            usage_metadata=getattr(response, "usage_metadata", None),
        )


def _first_text(response: Any) -> str:
    """Extract the first text block from a Gemini response."""
    if not response:
        return ""

    candidates = getattr(response, "candidates", None) or []
    if candidates:
        content = getattr(candidates[0], "content", None)
        for part in getattr(content, "parts", None) or []:
            text = getattr(part, "text", None)
            if text:
                return text

    text = getattr(response, "text", None)
    return text if isinstance(text, str) else ""


def _finish_reason(response: Any) -> str | None:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    reason = getattr(candidates[0], "finish_reason", None)
    if reason is None:
        return None
    return getattr(reason, "name", None) or str(reason)
