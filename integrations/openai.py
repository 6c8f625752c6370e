"""
Unified OpenAI API interface.

Provides centralized client management and a Responses API wrapper with
usage logging.

Key functions:
- get_openai_client(): Get configured OpenAI client singleton
- complete(): Generate completion using Responses API
"""

import os
import threading

from openai import APIConnectionError, APIError, APITimeoutError, OpenAI, RateLimitError

from config import OPENAI_MODEL, TIMEOUTS, get_logger

logger = get_logger("openai")

# =============================================================================
# Client Management
# =============================================================================

# Singleton client instance with thread lock
_client = None
_client_lock = threading.Lock()


def get_openai_client():
    """
    Get configured OpenAI client singleton (thread-safe).

    Returns:
        OpenAI: Configured client instance

    Raises:
        ValueError: If OPENAI_API_KEY environment variable is not set
    """
    global _client

    # Double-checked locking pattern for thread safety
    if _client is None:
        with _client_lock:
            if _client is None:
                api_key = os.getenv("OPENAI_API_KEY")
                if not api_key:
                    logger.error("OPENAI_ERROR: OPENAI_API_KEY not found in environment")
                    raise ValueError("OPENAI_API_KEY environment variable not set")

                _client = OpenAI(api_key=api_key, timeout=TIMEOUTS["http_request"])
                logger.info("OPENAI: Client initialized successfully")

    return _client


def reset_openai_client():
    """Drop the cached client (used when credentials change and in tests)"""
    global _client
    with _client_lock:
        _client = None


# =============================================================================
# Responses API Wrapper
# =============================================================================


def complete(
    input_text,
    instructions=None,
    model=None,
    max_tokens=None,
    temperature=None,
    context=None,
):
    """
    Generate a completion using OpenAI's Responses API.

    Args:
        input_text: Prompt text
        instructions: Optional system instructions
        model: Model to use (defaults to OPENAI_MODEL)
        max_tokens: Maximum tokens in response
        temperature: Sampling temperature
        context: Optional context string for logging (e.g., "BIRTHDAY_POEM")

    Returns:
        str: The generated text response

    Raises:
        Exception: If API call fails
    """
    client = get_openai_client()
    model = model or OPENAI_MODEL
    context = context or "COMPLETION"

    params = {"model": model, "input": input_text}
    if instructions:
        params["instructions"] = instructions
    if max_tokens:
        params["max_output_tokens"] = max_tokens
    if temperature is not None:
        params["temperature"] = temperature

    logger.info(f"AI_{context}: Calling Responses API with model={model}")

    try:
        response = client.responses.create(**params)

        if hasattr(response, "usage") and response.usage:
            usage = response.usage
            logger.info(
                f"AI_{context}_USAGE: "
                f"input={getattr(usage, 'input_tokens', 'N/A')}, "
                f"output={getattr(usage, 'output_tokens', 'N/A')}, "
                f"total={getattr(usage, 'total_tokens', 'N/A')}"
            )

        return response.output_text

    except RateLimitError as e:
        logger.error(f"AI_{context}_ERROR: Rate limit exceeded: {e}")
        raise
    except APITimeoutError as e:
        logger.error(f"AI_{context}_ERROR: API request timed out: {e}")
        raise
    except APIConnectionError as e:
        logger.error(f"AI_{context}_ERROR: Connection failed: {e}")
        raise
    except APIError as e:
        logger.error(f"AI_{context}_ERROR: API error: {e}")
        raise
