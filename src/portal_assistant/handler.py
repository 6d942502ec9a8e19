"""
Portal Assistant Lambda Handlers
--------------------------------
API Gateway handlers for the portal chat endpoints:
- /ai/chat: Prompt passthrough to the completion API
- /ai/chat-database: Comprehensive database search + completion
- /ai/diagnostic: Probes the model list to find a working model

All three share one pipeline (run_chat). Callers always receive a JSON
envelope with a ``success`` flag; configuration, search and model failures
are reported with HTTP 200 and ``fallback: true``.
"""

import base64
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from .config import (
    ANTHROPIC_KEY_PREFIX,
    DIAGNOSTIC_MODELS,
    CompletionProvider,
    PortalConfig,
)
from .errors import ConfigurationMissing, MalformedRequest, NoWorkingModel
from .llm.completion import CompletionClient, ProbingClient, complete, create_client
from .rag.prompt import (
    DIAGNOSTIC_PROBE,
    build_basic_prompt,
    build_diagnostic_prompt,
    build_search_prompt,
)
from .search.aggregator import aggregate_search
from .search.analyzer import analyze_query
from .store.base import RowStore
from .store.supabase_client import SupabaseRowStore
from .utils.logger import get_logger, mask_secret

logger = get_logger(__name__)

CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
}

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

BASIC = "basic"
DATABASE = "database"
DIAGNOSTIC = "diagnostic"

DEFAULT_MAX_TOKENS = {
    BASIC: 1500,
    DATABASE: 2000,
    DIAGNOSTIC: 1000,
}

DIAGNOSTIC_RECOMMENDATIONS = [
    "Check if your API key has Claude 3 access at console.anthropic.com",
    "Verify your account has sufficient credits",
    "Try generating a new API key",
    "Contact Anthropic support if issue persists",
]

# Built once per Lambda container
config = PortalConfig.from_env()


def _response(status_code: int, body: Optional[dict], headers: dict = None) -> dict:
    """Build API Gateway response."""
    return {
        "statusCode": status_code,
        "headers": headers or CORS_HEADERS,
        "body": "" if body is None else json.dumps(body, default=str),
    }


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _get_method(event: dict) -> str:
    method = event.get("httpMethod") or (
        (event.get("requestContext") or {}).get("http", {}).get("method")
    )
    return (method or "POST").upper()


def _parse_body(event: dict) -> Any:
    """Decode the JSON request body. Raises ValueError when it is not valid JSON."""
    raw = event.get("body")
    if not raw:
        return {}
    if event.get("isBase64Encoded"):
        raw = base64.b64decode(raw).decode("utf-8")
    return json.loads(raw)


def parse_chat_request(body: Any, default_max_tokens: int) -> Tuple[str, int]:
    """
    Extract the user message and token budget from a request body.

    Args:
        body: Decoded JSON body
        default_max_tokens: Budget used when ``maxTokens`` is absent

    Returns:
        Tuple of (message, max_tokens)

    Raises:
        MalformedRequest: If no prompt is given or maxTokens is invalid
    """
    if not isinstance(body, dict):
        raise MalformedRequest("Request body must be a JSON object")

    message = body.get("prompt") or body.get("userMessage")
    if not isinstance(message, str) or not message.strip():
        raise MalformedRequest("Prompt required: provide 'prompt' or 'userMessage'")

    max_tokens = body.get("maxTokens", default_max_tokens)
    if max_tokens is None:
        max_tokens = default_max_tokens
    if isinstance(max_tokens, bool) or not isinstance(max_tokens, int) or max_tokens <= 0:
        raise MalformedRequest("maxTokens must be a positive integer")

    return message, max_tokens


def _soft_failure(error: str, **diagnostics) -> Dict[str, Any]:
    body = {"success": False, "error": error}
    body.update(diagnostics)
    body["fallback"] = True
    return body


def _no_working_model_failure(e: NoWorkingModel, mode: str, cfg: PortalConfig) -> Dict[str, Any]:
    diagnosis, solution = e.diagnose()
    diagnostics = {
        "diagnosis": diagnosis,
        "solution": solution,
        "detailedResults": [attempt.to_dict() for attempt in e.attempts],
        "testedModels": e.models,
        "lastError": e.last_error,
    }
    if mode == DIAGNOSTIC:
        diagnostics["apiKeyPrefix"] = mask_secret(cfg.anthropic_api_key, 15)
        diagnostics["recommendations"] = DIAGNOSTIC_RECOMMENDATIONS
    return _soft_failure(f"No working Claude models found: {diagnosis}", **diagnostics)


def _create_store(cfg: PortalConfig) -> RowStore:
    return SupabaseRowStore(
        url=cfg.supabase_url,
        api_key=cfg.supabase_key,
        timeout=cfg.http_timeout_seconds,
    )


def run_chat(
    message: str,
    max_tokens: int,
    mode: str,
    cfg: PortalConfig,
    store: RowStore = None,
    client: CompletionClient = None
) -> Dict[str, Any]:
    """
    Run the chat pipeline for one request.

    parse → (analyze → aggregate) → build prompt → complete

    Diagnostic mode with the Anthropic backend only accepts keys in the
    console format (``sk-ant-api03-``); any other key is reported as a soft
    failure before a model is probed.

    Args:
        message: User message
        max_tokens: Completion token budget
        mode: basic, database or diagnostic
        cfg: Process configuration
        store: Row store override (database mode)
        client: Completion backend override

    Returns:
        Response envelope (success or soft failure)
    """
    try:
        missing = cfg.missing_completion_credentials()
        if missing:
            raise ConfigurationMissing(missing)
        if mode == DATABASE:
            missing = cfg.missing_store_credentials()
            if missing and store is None:
                raise ConfigurationMissing(missing)
    except ConfigurationMissing as e:
        logger.error(f"Configuration missing: {e.missing}")
        return _soft_failure(
            str(e),
            diagnostic=f"{', '.join(e.missing)} environment variable missing or invalid",
            setupInstructions="Set the missing values in the function's environment variables",
        )

    logger.info(
        f"Chat request: mode={mode}, provider={cfg.provider.value}, "
        f"key={mask_secret(cfg.anthropic_api_key)}, max_tokens={max_tokens}"
    )

    client = client or create_client(cfg)
    models = cfg.models
    search_results = None

    if mode == DATABASE:
        analysis = analyze_query(message)
        logger.info(f"Query analysis: {analysis.to_dict()}")
        aggregated = aggregate_search(analysis, store or _create_store(cfg), parallel=cfg.search_parallel)
        search_results = aggregated.to_dict()
        if aggregated.error:
            return _soft_failure(
                f"Database search failed: {aggregated.error}",
                searchResults=search_results,
            )
        prompt = build_search_prompt(message, aggregated)
    elif mode == DIAGNOSTIC:
        if cfg.provider == CompletionProvider.ANTHROPIC:
            if not cfg.anthropic_api_key.startswith(ANTHROPIC_KEY_PREFIX):
                logger.error("Invalid API key format")
                return _soft_failure(
                    "Invalid API key format",
                    diagnostic=f"API key should start with {ANTHROPIC_KEY_PREFIX}",
                    keyPrefix=mask_secret(cfg.anthropic_api_key, 15),
                )
            models = list(DIAGNOSTIC_MODELS)
        logger.info("🔍 Testing Claude models to find working one...")
        client = ProbingClient(client, DIAGNOSTIC_PROBE)
        prompt = build_diagnostic_prompt(message)
    else:
        prompt = build_basic_prompt(message)

    try:
        result = complete(prompt, max_tokens, models, client)
    except NoWorkingModel as e:
        failure = _no_working_model_failure(e, mode, cfg)
        if search_results is not None:
            failure["searchResults"] = search_results
        return failure

    body = {
        "success": True,
        "response": result.text,
        "model": result.model,
        "mode": mode,
        "usage": result.usage,
    }
    if search_results is not None:
        body["searchResults"] = search_results
    if mode == DIAGNOSTIC:
        body["mode"] = "diagnostic_success"
        body["workingModel"] = result.model
        body["message"] = f"Successfully connected using model: {result.model}"
        body["testedModels"] = result.tested_models
    body["timestamp"] = _timestamp()
    return body


def _handle(event: dict, mode: str, cfg: PortalConfig = None) -> dict:
    cfg = cfg or config
    method = _get_method(event)

    if method == "OPTIONS":
        return _response(200, None, PREFLIGHT_HEADERS)

    if method != "POST":
        return _response(
            405,
            {"error": "Method not allowed. Use POST.", "success": False},
            {"Access-Control-Allow-Origin": "*"},
        )

    try:
        body = _parse_body(event)
    except ValueError as e:
        logger.error(f"Malformed request body: {e}")
        return _response(500, {"success": False, "error": "Invalid JSON body", "details": str(e)})

    try:
        message, max_tokens = parse_chat_request(body, DEFAULT_MAX_TOKENS[mode])
    except MalformedRequest as e:
        return _response(400, {"success": False, "error": str(e)})

    try:
        return _response(200, run_chat(message, max_tokens, mode, cfg))
    except Exception as e:
        logger.error(f"Function error: {e}")
        return _response(500, {"success": False, "error": "Internal function error", "details": str(e)})


def chat_handler(event, context):
    """POST /ai/chat: prompt passthrough with the portal assistant preamble."""
    return _handle(event, BASIC)


def database_chat_handler(event, context):
    """POST /ai/chat-database: answer from the portal database search."""
    return _handle(event, DATABASE)


def diagnostic_handler(event, context):
    """POST /ai/diagnostic: find a working model and answer with it."""
    return _handle(event, DIAGNOSTIC)
