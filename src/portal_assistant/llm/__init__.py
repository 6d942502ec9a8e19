from .anthropic_client import AnthropicClient
from .bedrock_client import BedrockClient
from .completion import CompletionResult, complete, create_client

__all__ = ["AnthropicClient", "BedrockClient", "CompletionResult", "complete", "create_client"]
