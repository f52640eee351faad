from .google_ai_client import GoogleAIClient, GoogleAIClientError, GoogleAIResult

__all__ = ["GoogleAIClient", "GoogleAIClientError", "GoogleAIResult"]
