# analyzer/ai_parser.py
# ─────────────────────────────────────────────────────────────────────────────
# All Claude API calls in one place.
#
# One call per analysis: the composed prompt goes out, the text of the
# first content block comes back. No retries, no streaming. Every failure
# (missing key, network, quota, odd response shape) becomes CompletionError.
#
# Configurable model via environment variable:
#   CLAUDE_MODEL=claude-sonnet-4-5-20250929 for better accuracy
# ─────────────────────────────────────────────────────────────────────────────

import os
import logging
from anthropic import Anthropic

from errors import CompletionError

logger = logging.getLogger(__name__)

_MODEL      = os.environ.get("CLAUDE_MODEL", "claude-haiku-4-5-20251001")
_MAX_TOKENS = int(os.environ.get("CLAUDE_MAX_TOKENS", "2048"))


class ClaudeCompletionClient:
    """Send a prompt to Claude and return the raw completion text."""

    def __init__(self, api_key: str = None, model: str = _MODEL, max_tokens: int = _MAX_TOKENS):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self._client = None

    def _get_client(self) -> Anthropic:
        if self._client is None:
            api_key = self.api_key or os.environ.get("ANTHROPIC_API_KEY")
            if not api_key:
                raise ValueError("ANTHROPIC_API_KEY not set. Add it to your .env file.")
            self._client = Anthropic(api_key=api_key)
        return self._client

    def complete(self, prompt: str) -> str:
        try:
            response = self._get_client().messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
            text = response.content[0].text
        except Exception as e:
            logger.error("Claude completion failed (model=%s): %s", self.model, e, exc_info=True)
            raise CompletionError(detail=str(e)) from e

        logger.info("Claude completion received (model=%s, %d chars)", self.model, len(text))
        return text


_client = None


def get_completion_client() -> ClaudeCompletionClient:
    global _client
    if _client is None:
        _client = ClaudeCompletionClient()
    return _client
