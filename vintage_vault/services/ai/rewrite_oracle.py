"""
Rewrite oracle: asks a chat model to clean up flagged forum content

The OpenAI client is tried first and OpenRouter second. Every failure,
whatever its source, leaves this module as an OracleError.
"""
import openai
import tiktoken
from flask import current_app

from vintage_vault.services.moderation.errors import OracleError

from .openai_client import OpenAIClient
from .openrouter_client import OpenRouterClient

SYSTEM_PROMPT = (
    "You are VintageVaultMod, the forum moderator for Vintage Vault, a community "
    "marketplace for vintage fashion. Rewrite flagged posts so they follow the "
    "community guidelines: no profanity, no spam or unauthorised advertising, no "
    "harassment or personal attacks. Keep the author's intent and any vintage "
    "fashion terminology. Change only what is necessary."
)

USER_PROMPT_TEMPLATE = """The following content was flagged for these issues:
{issues}

=== ORIGINAL CONTENT ===
{content}
=== END CONTENT ===

Return ONLY the improved content without any explanations or additional text."""


def format_issues(issues):
    lines = []
    for issue in issues:
        lines.append(
            f"- {issue.get('type', 'other')}: {issue.get('explanation', '')} "
            f"(severity: {issue.get('severity', 0)})")
    return '\n'.join(lines)


class RewriteOracle:
    """rewrite(content, issues) -> str, raising OracleError on any failure"""

    def __init__(self, providers=None):
        cfg = current_app.config
        if providers is None:
            providers = [OpenAIClient(), OpenRouterClient()]
        self.providers = [p for p in providers if p.is_configured()]
        self.max_content_tokens = int(cfg.get('REWRITE_MAX_CONTENT_TOKENS', 4000))
        self.model_name = cfg.get('OPENAI_CHAT_MODEL', 'gpt-4o-mini')
        self._tokenizer = None
        self._tokenizer_unavailable = False

    def is_configured(self):
        return len(self.providers) > 0

    @property
    def tokenizer(self):
        # Loaded once on first use; tiktoken may fetch encodings over the network
        if self._tokenizer is None and not self._tokenizer_unavailable:
            try:
                try:
                    self._tokenizer = tiktoken.encoding_for_model(self.model_name)
                except KeyError:
                    self._tokenizer = tiktoken.get_encoding("cl100k_base")
            except Exception as e:
                self._tokenizer_unavailable = True
                current_app.logger.warning(
                    f"Tokenizer unavailable, estimating token counts: {str(e)}")
        return self._tokenizer

    def count_tokens(self, text):
        """Count the number of tokens in a text string"""
        tokenizer = self.tokenizer
        if tokenizer is None:
            # Rough estimation (1 token ≈ 4 characters)
            return len(text) // 4
        return len(tokenizer.encode(text))

    def build_messages(self, content, issues):
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": USER_PROMPT_TEMPLATE.format(
                issues=format_issues(issues), content=content)}
        ]

    def rewrite(self, content, issues):
        if not self.providers:
            raise OracleError('No rewrite provider configured')

        token_count = self.count_tokens(content)
        if token_count > self.max_content_tokens:
            raise OracleError(
                f"Content too long for rewrite ({token_count} tokens, "
                f"limit {self.max_content_tokens})")

        messages = self.build_messages(content, issues)
        failures = []
        for provider in self.providers:
            try:
                return self._request_rewrite(provider, messages)
            except OracleError as e:
                current_app.logger.warning(f"Rewrite via {provider.name} failed: {e.message}")
                failures.append(f"{provider.name}: {e.message}")

        raise OracleError('All rewrite providers failed', details={'failures': failures})

    def _request_rewrite(self, provider, messages):
        try:
            response = provider.get_client().chat.completions.create(
                model=provider.model,
                messages=messages,
                temperature=0.3,
                max_tokens=1024
            )
        except (openai.APITimeoutError, openai.APIConnectionError) as e:
            raise OracleError(f"Rewrite service unreachable: {str(e)}") from e
        except openai.OpenAIError as e:
            raise OracleError(f"Rewrite service error: {str(e)}") from e

        try:
            text = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise OracleError('Malformed rewrite response') from e

        if not isinstance(text, str) or not text.strip():
            raise OracleError('Empty rewrite response')
        return text.strip()
