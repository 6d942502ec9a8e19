import json
import logging
from typing import Any, Dict, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import ModelRequestFailed

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

# Bedrock error codes mapped to the Anthropic error types used for diagnosis
_ERROR_TYPES = {
    "AccessDeniedException": "permission_error",
    "ResourceNotFoundException": "not_found_error",
    "ThrottlingException": "rate_limit_error",
    "ValidationException": "invalid_request_error",
    "ServiceQuotaExceededException": "rate_limit_error",
}


class BedrockClient:
    """Claude models hosted on AWS Bedrock, same ``send`` contract as AnthropicClient."""

    def __init__(self, region: str):
        self.region = region
        self._bedrock = None

    def _get_bedrock_client(self):
        """Lazily initialize Bedrock client."""
        if self._bedrock is None:
            logger.info(f"Initializing Bedrock client in region: {self.region}")
            self._bedrock = boto3.client("bedrock-runtime", region_name=self.region)
        return self._bedrock

    def send(self, model: str, prompt: str, max_tokens: int) -> Tuple[str, Dict[str, Any]]:
        body = json.dumps({
            "anthropic_version": "bedrock-2023-05-31",
            "max_tokens": max_tokens,
            "messages": [
                {
                    "role": "user",
                    "content": prompt
                }
            ]
        })

        try:
            bedrock = self._get_bedrock_client()
            response = bedrock.invoke_model(
                modelId=model,
                contentType="application/json",
                accept="application/json",
                body=body
            )
            raw_body = response["body"].read()
        except ClientError as e:
            error = e.response.get("Error", {})
            code = error.get("Code", "unknown")
            status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            raise ModelRequestFailed(
                model,
                error.get("Message", str(e)),
                status=status,
                error_type=_ERROR_TYPES.get(code, code),
            )
        except BotoCoreError as e:
            raise ModelRequestFailed(model, str(e), error_type="network_error")

        try:
            result = json.loads(raw_body.decode("utf-8"))
        except ValueError as e:
            raise ModelRequestFailed(model, f"Invalid JSON response: {e}", error_type="invalid_response")

        if not isinstance(result, dict):
            raise ModelRequestFailed(model, "Bedrock returned a non-object response", error_type="invalid_response")

        content = result.get("content") or []
        text = content[0].get("text") if isinstance(content, list) and content and isinstance(content[0], dict) else None
        if not text:
            raise ModelRequestFailed(model, "Bedrock returned empty content", error_type="empty_response")

        return text, result.get("usage") or {}
