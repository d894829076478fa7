import httpx
import openai
from flask import current_app


def build_http_client(timeout_seconds, connect_timeout=3.0):
    """HTTP client with a hard ceiling on every phase of a rewrite call"""
    return httpx.Client(
        timeout=httpx.Timeout(
            timeout_seconds,
            connect=min(connect_timeout, timeout_seconds),
            pool=2.0
        ),
        limits=httpx.Limits(
            max_keepalive_connections=20,
            max_connections=100,
            keepalive_expiry=300.0
        ),
        http2=True
    )


class OpenAIClient:
    """Manages OpenAI client configuration and connection pooling"""

    _client = None
    _client_key = None

    def __init__(self):
        cfg = current_app.config
        self.api_key = cfg.get('OPENAI_API_KEY')
        self.model = cfg.get('OPENAI_CHAT_MODEL', 'gpt-4o-mini')
        self.timeout = float(cfg.get('REWRITE_TIMEOUT_SECONDS', 10))
        self.client = None

        if self.api_key:
            try:
                self.client = self._get_or_create_client(self.api_key, self.timeout)
            except (ValueError, TypeError) as e:
                current_app.logger.error(f"Failed to configure OpenAI: {str(e)}")
                self.client = None

    @classmethod
    def _get_or_create_client(cls, api_key, timeout):
        """Create or reuse the OpenAI client for this key and timeout"""
        if cls._client is None or cls._client_key != (api_key, timeout):
            cls._client = openai.OpenAI(
                api_key=api_key,
                http_client=build_http_client(timeout),
                max_retries=0
            )
            cls._client_key = (api_key, timeout)

        return cls._client

    @property
    def name(self):
        return 'openai'

    def is_configured(self):
        """Check if OpenAI client is properly configured"""
        return self.api_key is not None and self.client is not None

    def get_client(self):
        if not self.is_configured():
            raise RuntimeError("OpenAI client not configured - API key missing")
        return self.client
