"""
Anthropic Messages Client
-------------------------
Single-model completion requests against the Anthropic Messages API.
"""

import http.client
import json
import logging
import urllib.request
import urllib.error
from typing import Any, Dict, Tuple

from ..errors import ModelRequestFailed

# Setup logger (compatible with both local and Lambda)
logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def _parse_error(model: str, status: int, body: str) -> ModelRequestFailed:
    message = body[:300] or "Unknown error"
    error_type = "unknown"
    try:
        error = json.loads(body).get("error") or {}
        message = error.get("message") or message
        error_type = error.get("type") or error_type
    except (ValueError, AttributeError):
        pass
    return ModelRequestFailed(model, message, status=status, error_type=error_type)


class AnthropicClient:
    """
    Anthropic Messages API wrapper.

    One ``send`` is one HTTP request for one model; choosing between models
    is left to ``llm.completion.complete``.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.anthropic.com/v1/messages",
        api_version: str = "2023-06-01",
        timeout: int = 30
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.api_version = api_version
        self.timeout = timeout

    def send(self, model: str, prompt: str, max_tokens: int) -> Tuple[str, Dict[str, Any]]:
        """
        Send a single-turn prompt to one model.

        Args:
            model: Model identifier
            prompt: User message content
            max_tokens: Completion token budget

        Returns:
            Tuple of (response text, usage)

        Raises:
            ModelRequestFailed: On a non-success response, network failure or
                empty completion
        """
        payload = json.dumps({
            "model": model,
            "max_tokens": max_tokens,
            "messages": [
                {
                    "role": "user",
                    "content": prompt
                }
            ]
        }).encode("utf-8")

        request = urllib.request.Request(
            self.api_url,
            data=payload,
            headers={
                "Content-Type": "application/json",
                "x-api-key": self.api_key,
                "anthropic-version": self.api_version,
            },
            method="POST",
        )

        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                data = json.loads(response.read().decode("utf-8"))
        except urllib.error.HTTPError as e:
            error_body = e.read().decode("utf-8", errors="replace")
            raise _parse_error(model, e.code, error_body)
        except (urllib.error.URLError, http.client.HTTPException, TimeoutError, OSError) as e:
            raise ModelRequestFailed(model, str(e), error_type="network_error")
        except ValueError as e:
            raise ModelRequestFailed(model, f"Invalid JSON response: {e}", error_type="invalid_response")

        if not isinstance(data, dict):
            raise ModelRequestFailed(model, "Claude API returned a non-object response", error_type="invalid_response")

        content = data.get("content") or []
        text = content[0].get("text") if isinstance(content, list) and content and isinstance(content[0], dict) else None
        if not text:
            raise ModelRequestFailed(model, "Claude API returned empty content", error_type="empty_response")

        return text, data.get("usage") or {}
