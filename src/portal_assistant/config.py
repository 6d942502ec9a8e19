"""
Portal Assistant Configuration
------------------------------
Central configuration for the completion API, model fallback lists and the
row store. Built once per process from environment variables and passed into
the request pipeline.
"""

import logging
import os
from enum import Enum
from dataclasses import dataclass, field
from typing import List, Mapping, Optional


class CompletionProvider(Enum):
    """Completion API backends."""
    ANTHROPIC = "anthropic"   # Anthropic Messages API over HTTPS
    BEDROCK = "bedrock"       # Claude on AWS Bedrock (IAM credentials)


# Newest / most capable first
DEFAULT_ANTHROPIC_MODELS = [
    "claude-3-5-sonnet-20241022",
    "claude-3-5-sonnet-20240620",
    "claude-3-haiku-20240307",
]

DEFAULT_BEDROCK_MODELS = [
    "anthropic.claude-3-5-sonnet-20240620-v1:0",
    "anthropic.claude-3-haiku-20240307-v1:0",
]

# Broad list probed by the diagnostic endpoint, current and legacy names
DIAGNOSTIC_MODELS = [
    "claude-3-5-sonnet-20241022",
    "claude-3-5-sonnet-20240620",
    "claude-3-5-haiku-20241022",
    "claude-3-sonnet-20240229",
    "claude-3-opus-20240229",
    "claude-3-haiku-20240307",
    "claude-3-5-sonnet",
    "claude-3-sonnet",
    "claude-3-haiku",
    "claude-3-opus",
    "claude-2.1",
    "claude-2.0",
    "claude-instant-1.2",
    "claude-instant-1.1",
    "claude-instant-1",
    "claude-2",
    "claude-3-5-sonnet-latest",
    "claude-3-sonnet-latest",
    "claude-3-haiku-latest",
]

# Console-issued API keys; checked by the diagnostic endpoint only
ANTHROPIC_KEY_PREFIX = "sk-ant-api03-"

_TRUE_VALUES = {"1", "true", "yes", "on"}

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def _split_list(value: Optional[str], default: List[str]) -> List[str]:
    if not value:
        return list(default)
    items = [item.strip() for item in value.split(",")]
    return [item for item in items if item] or list(default)


@dataclass
class PortalConfig:
    """Portal assistant configuration settings."""

    # Completion API
    provider: CompletionProvider = CompletionProvider.ANTHROPIC
    anthropic_api_key: str = ""
    anthropic_api_url: str = "https://api.anthropic.com/v1/messages"
    anthropic_version: str = "2023-06-01"
    anthropic_models: List[str] = field(default_factory=lambda: list(DEFAULT_ANTHROPIC_MODELS))

    # Bedrock
    aws_region: str = "us-east-1"
    bedrock_models: List[str] = field(default_factory=lambda: list(DEFAULT_BEDROCK_MODELS))

    # Row store (Supabase / PostgREST)
    supabase_url: str = ""
    supabase_key: str = ""

    # Request handling
    search_parallel: bool = False
    http_timeout_seconds: int = 30

    # Environment variables that were set but unusable; the defaults were kept
    invalid_settings: List[str] = field(default_factory=list)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = None) -> "PortalConfig":
        """
        Build configuration from environment variables.

        Unusable values never raise: the default is kept, the variable is
        logged and listed in ``invalid_settings`` so requests can report it.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            PortalConfig instance
        """
        env = os.environ if environ is None else environ
        invalid = []

        provider_name = env.get("COMPLETION_PROVIDER", "anthropic").strip().lower()
        try:
            provider = CompletionProvider(provider_name)
        except ValueError:
            logger.error(f"Unknown COMPLETION_PROVIDER: {provider_name}")
            provider = CompletionProvider.ANTHROPIC
            invalid.append("COMPLETION_PROVIDER")

        timeout_value = env.get("HTTP_TIMEOUT_SECONDS", "30").strip()
        try:
            http_timeout_seconds = int(timeout_value)
            if http_timeout_seconds <= 0:
                raise ValueError(timeout_value)
        except ValueError:
            logger.error(f"Invalid HTTP_TIMEOUT_SECONDS: {timeout_value}")
            http_timeout_seconds = 30
            invalid.append("HTTP_TIMEOUT_SECONDS")

        return cls(
            provider=provider,
            anthropic_api_key=env.get("ANTHROPIC_API_KEY", "").strip(),
            anthropic_api_url=env.get("ANTHROPIC_API_URL", "https://api.anthropic.com/v1/messages"),
            anthropic_version=env.get("ANTHROPIC_VERSION", "2023-06-01"),
            anthropic_models=_split_list(env.get("ANTHROPIC_MODELS"), DEFAULT_ANTHROPIC_MODELS),
            aws_region=env.get("AWS_REGION", "us-east-1"),
            bedrock_models=_split_list(env.get("BEDROCK_MODELS"), DEFAULT_BEDROCK_MODELS),
            supabase_url=env.get("SUPABASE_URL", "").strip().rstrip("/"),
            supabase_key=(env.get("SUPABASE_ANON_KEY") or env.get("SUPABASE_KEY") or "").strip(),
            search_parallel=env.get("SEARCH_PARALLEL", "false").strip().lower() in _TRUE_VALUES,
            http_timeout_seconds=http_timeout_seconds,
            invalid_settings=invalid,
        )

    @property
    def models(self) -> List[str]:
        """Fallback model list for the configured provider."""
        if self.provider == CompletionProvider.BEDROCK:
            return list(self.bedrock_models)
        return list(self.anthropic_models)

    def missing_completion_credentials(self) -> List[str]:
        """Names of absent or invalid settings required to call the completion API."""
        missing = list(self.invalid_settings)
        if self.provider == CompletionProvider.ANTHROPIC and not self.anthropic_api_key:
            missing.append("ANTHROPIC_API_KEY")
        return missing

    def missing_store_credentials(self) -> List[str]:
        """Names of absent settings required to query the row store."""
        missing = []
        if not self.supabase_url:
            missing.append("SUPABASE_URL")
        if not self.supabase_key:
            missing.append("SUPABASE_ANON_KEY")
        return missing
