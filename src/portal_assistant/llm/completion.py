"""
Model fallback for completion requests.

Models are tried once each, in order; the first non-empty completion wins.
There is no retry or backoff beyond the list itself.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, Sequence, Tuple

from ..config import CompletionProvider, PortalConfig
from ..errors import ModelRequestFailed, NoWorkingModel
from .anthropic_client import AnthropicClient
from .bedrock_client import BedrockClient

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class CompletionClient(Protocol):
    def send(self, model: str, prompt: str, max_tokens: int) -> Tuple[str, Dict[str, Any]]: ...


@dataclass
class CompletionResult:
    """A successful completion and the model that produced it."""
    text: str
    model: str
    usage: Dict[str, Any] = field(default_factory=dict)
    attempts: List[ModelRequestFailed] = field(default_factory=list)

    @property
    def tested_models(self) -> List[str]:
        """Models tried, up to and including the one that answered."""
        return [a.model for a in self.attempts] + [self.model]


def complete(
    prompt: str,
    max_tokens: int,
    models: Sequence[str],
    client: CompletionClient
) -> CompletionResult:
    """
    Try each model in order until one returns a completion.

    Args:
        prompt: Composed prompt
        max_tokens: Completion token budget
        models: Ordered model identifiers, preferred first
        client: Backend implementing ``send``

    Returns:
        CompletionResult from the first working model

    Raises:
        NoWorkingModel: If every model failed
    """
    attempts: List[ModelRequestFailed] = []

    for model in models:
        logger.info(f"Calling LLM model: {model}")
        try:
            text, usage = client.send(model, prompt, max_tokens)
        except ModelRequestFailed as e:
            logger.warning(f"❌ {model} failed: {e.status} - {e.message}")
            attempts.append(e)
            continue

        logger.info(f"✅ Success with model: {model}")
        return CompletionResult(text=text, model=model, usage=usage, attempts=attempts)

    logger.error(f"🚨 No working models after trying {len(attempts)}")
    raise NoWorkingModel(models, attempts)


class ProbingClient:
    """
    Wraps a backend so each model must first answer a short probe message
    before the real prompt is sent to it.
    """

    def __init__(self, client: CompletionClient, probe: str, probe_max_tokens: int = 100):
        self.client = client
        self.probe = probe
        self.probe_max_tokens = probe_max_tokens

    def send(self, model: str, prompt: str, max_tokens: int) -> Tuple[str, Dict[str, Any]]:
        logger.info(f"Testing model: {model}")
        self.client.send(model, self.probe, self.probe_max_tokens)
        return self.client.send(model, prompt, max_tokens)


def create_client(config: PortalConfig) -> CompletionClient:
    """Build the completion backend selected by configuration."""
    if config.provider == CompletionProvider.BEDROCK:
        return BedrockClient(region=config.aws_region)
    return AnthropicClient(
        api_key=config.anthropic_api_key,
        api_url=config.anthropic_api_url,
        api_version=config.anthropic_version,
        timeout=config.http_timeout_seconds,
    )
