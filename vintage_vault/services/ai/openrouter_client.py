import threading

import openai
from flask import current_app

from .openai_client import build_http_client

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterClient:
    """OpenRouter through the OpenAI SDK, one client per thread"""

    _thread_local = threading.local()

    def __init__(self):
        cfg = current_app.config
        self.api_key = cfg.get('OPENROUTER_API_KEY') or None
        self.model = cfg.get('OPENROUTER_MODEL', 'openrouter/auto')
        self.timeout = float(cfg.get('REWRITE_TIMEOUT_SECONDS', 10))

    @classmethod
    def _get_or_create_client(cls, api_key, timeout):
        """Create or reuse thread-local OpenAI client configured for OpenRouter"""
        local = cls._thread_local
        if getattr(local, 'client_key', None) != (api_key, timeout):
            local.client = openai.OpenAI(
                base_url=OPENROUTER_BASE_URL,
                api_key=api_key,
                http_client=build_http_client(timeout, connect_timeout=5.0),
                max_retries=0
            )
            local.client_key = (api_key, timeout)

        return local.client

    @property
    def name(self):
        return 'openrouter'

    def is_configured(self):
        return self.api_key is not None

    def get_client(self):
        """Get the configured OpenAI client for OpenRouter (thread-local)"""
        if not self.is_configured():
            raise RuntimeError("OpenRouter client not configured - API key missing")
        return self._get_or_create_client(self.api_key, self.timeout)
