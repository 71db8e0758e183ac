"""Startup configuration for the chat client.

A :class:`ChatConfig` is built once at startup, usually with
:meth:`ChatConfig.from_env`, and handed to the session that needs it.
"""

import logging
import os
from collections.abc import Mapping
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."

# Used instead of the environment when running in debug mode.
DEBUG_INFERENCE_URL = "http://localhost:8321"
DEBUG_MODEL_ID = "meta-llama/Llama-3.2-3B-Instruct"


class ConfigurationError(Exception):
    """Missing or malformed inference endpoint or model id."""


class ChatConfig(BaseModel):
    """Inference endpoint, model and prompt settings.

    Args:
        inference_url: Base URL of the inference server (http or https).
        model_id: Model identifier sent with every request.
        system_prompt: Fixed system prompt prepended to every request.
        api_key: Bearer token for the server, if it needs one.
        timeout: Request timeout in seconds, enforced by the client.
        max_retries: Connection retries, enforced by the client.
    """

    model_config = ConfigDict(frozen=True)

    inference_url: str
    model_id: str
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    api_key: str | None = None
    timeout: float = 600.0
    max_retries: int = 2

    @field_validator("inference_url")
    @classmethod
    def _check_url(cls, url: str) -> str:
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"not an http(s) URL: {url!r}")
        return url

    @field_validator("model_id")
    @classmethod
    def _check_model_id(cls, model_id: str) -> str:
        if not model_id.strip():
            raise ValueError("model id must not be empty")
        return model_id

    @classmethod
    def create(cls, **kwargs) -> "ChatConfig":
        """Validate ``kwargs``, raising :class:`ConfigurationError` on failure."""
        try:
            return cls(**kwargs)
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        debug: bool | None = None,
    ) -> "ChatConfig":
        """Read configuration from the process environment.

        Outside debug mode ``INFERENCE_URL`` and ``MODEL_ID`` are required.
        In debug mode (``debug=True`` or ``LLAMACHAT_DEBUG=1``) the debug
        constants are used for both. ``SYSTEM_PROMPT``,
        ``INFERENCE_API_KEY``, ``INFERENCE_TIMEOUT`` and
        ``INFERENCE_MAX_RETRIES`` are optional overrides.

        Raises:
            ConfigurationError: If a value is missing or malformed.
        """
        env = os.environ if environ is None else environ
        if debug is None:
            debug = env.get("LLAMACHAT_DEBUG", "") in ("1", "true", "yes")

        if debug:
            logger.info("Debug mode: using built-in inference endpoint")
            url = DEBUG_INFERENCE_URL
            model_id = DEBUG_MODEL_ID
        else:
            url = env.get("INFERENCE_URL", "")
            model_id = env.get("MODEL_ID", "")
            if not url:
                raise ConfigurationError("INFERENCE_URL is not set")
            if not model_id:
                raise ConfigurationError("MODEL_ID is not set")

        kwargs = {"inference_url": url, "model_id": model_id}
        if env.get("SYSTEM_PROMPT"):
            kwargs["system_prompt"] = env["SYSTEM_PROMPT"]
        if env.get("INFERENCE_API_KEY"):
            kwargs["api_key"] = env["INFERENCE_API_KEY"]
        if env.get("INFERENCE_TIMEOUT"):
            kwargs["timeout"] = env["INFERENCE_TIMEOUT"]
        if env.get("INFERENCE_MAX_RETRIES"):
            kwargs["max_retries"] = env["INFERENCE_MAX_RETRIES"]
        return cls.create(**kwargs)
