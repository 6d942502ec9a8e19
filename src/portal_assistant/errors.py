"""
Portal assistant exceptions.

Every failure that crosses a module boundary is one of these; the HTTP
handlers convert them into the JSON envelope.
"""

from typing import Any, Dict, List, Optional, Tuple


class PortalError(Exception):
    """Base class for portal assistant errors."""


class ConfigurationMissing(PortalError):
    """Raised when a required credential or setting is absent."""
    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(f"{', '.join(self.missing)} not configured")


class MalformedRequest(PortalError):
    """Raised when the request body lacks a usable prompt."""


class RowStoreQueryFailed(PortalError):
    """Raised when a category lookup against the row store fails."""
    def __init__(self, category: str, message: str, status: Optional[int] = None):
        self.category = category
        self.status = status
        super().__init__(f"Row store query failed for {category}: {message}")


class ModelRequestFailed(PortalError):
    """Raised when a single model rejects a completion request."""
    def __init__(
        self,
        model: str,
        message: str,
        status: Optional[int] = None,
        error_type: str = "unknown"
    ):
        self.model = model
        self.status = status
        self.error_type = error_type
        self.message = message
        super().__init__(f"{model} failed: {status} - {message}")

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "model": self.model,
            "error": self.message,
            "errorType": self.error_type,
        }
        if self.status is not None:
            result["status"] = self.status
        return result


class NoWorkingModel(PortalError):
    """Raised when every model in the fallback list failed."""
    def __init__(self, models: List[str], attempts: List[ModelRequestFailed]):
        self.models = list(models)
        self.attempts = list(attempts)
        super().__init__("No working Claude models found")

    @property
    def last_error(self) -> Optional[Dict[str, Any]]:
        if not self.attempts:
            return None
        last = self.attempts[-1]
        return {"type": last.error_type, "message": last.message}

    def diagnose(self) -> Tuple[str, str]:
        """
        Classify the collected failures into a diagnosis and a suggested fix.

        Returns:
            Tuple of (diagnosis, solution)
        """
        diagnosis = "Unknown issue"
        solution = "Contact Anthropic support"

        if not self.attempts:
            return diagnosis, solution

        error_types = [a.error_type or "unknown" for a in self.attempts]
        status_codes = [a.status for a in self.attempts if a.status]

        if "permission_error" in error_types or 403 in status_codes:
            diagnosis = "API key does not have access to Claude models"
            solution = "Your API key may be from a different tier. Check console.anthropic.com for your model access."
        elif 401 in status_codes:
            diagnosis = "Invalid API key"
            solution = "Generate a new API key from console.anthropic.com"
        elif 429 in status_codes:
            diagnosis = "Rate limit exceeded"
            solution = "Wait a few minutes and try again"
        elif "billing_error" in error_types or 402 in status_codes:
            diagnosis = "Billing/credits issue"
            solution = "Add credits to your Anthropic account"
        elif all(t == "not_found_error" for t in error_types):
            diagnosis = "All model names are incorrect or unavailable"
            solution = "Your account may have access to different model names. Check Anthropic documentation."

        return diagnosis, solution
