from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING
import time
import logging

from note_editor.cancellation import CancellationToken
from note_editor.errors import OperationCancelled

if TYPE_CHECKING:
    import anthropic

logger = logging.getLogger(__name__)


@dataclass
class LLMConfig:
    """Configuration for Claude API client."""
    api_key: str
    model: str = "claude-3-5-haiku-20241022"
    max_tokens: int = 4096
    max_retries: int = 3  # Max retries for rate limit errors
    min_request_interval: float = 0.0  # Min seconds between requests per worker
    request_timeout: float = 30.0


def _is_rate_limit(exc: Exception) -> bool:
    error_str = str(exc).lower()
    return (
        "rate" in error_str or
        "429" in error_str or
        "too many requests" in error_str or
        "overloaded" in error_str
    )


class ClaudeClient:
    """Thin wrapper around Anthropic's Claude API for note edits."""

    def __init__(self, config: LLMConfig):
        self.config = config
        self._client: Optional["anthropic.Anthropic"] = None

    @property
    def client(self) -> "anthropic.Anthropic":
        """Lazy initialization of Anthropic client."""
        if self._client is None:
            import anthropic
            self._client = anthropic.Anthropic(api_key=self.config.api_key)
        return self._client

    def _pause(self, seconds: float, cancel_token: Optional[CancellationToken]) -> None:
        if seconds <= 0:
            return
        if cancel_token is None:
            time.sleep(seconds)
        elif cancel_token.wait(seconds):
            raise OperationCancelled()

    def _timeout(self, cancel_token: Optional[CancellationToken]) -> float:
        timeout = self.config.request_timeout
        if cancel_token is not None:
            remaining = cancel_token.remaining()
            if remaining is not None:
                timeout = min(timeout, remaining)
        return timeout

    def complete(
        self,
        prompt: str,
        temperature: float,
        max_tokens: Optional[int] = None,
        system: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> str:
        """
        Send a single-turn prompt and return the reply text.

        Rate limit and overload errors are retried with exponential backoff
        (2s, 4s, 8s). Any other error propagates to the caller.
        """
        kwargs = {
            "model": self.config.model,
            "max_tokens": max_tokens or self.config.max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system

        for attempt in range(self.config.max_retries + 1):
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            self._pause(self.config.min_request_interval, cancel_token)

            try:
                message = self.client.messages.create(
                    timeout=self._timeout(cancel_token),
                    **kwargs,
                )
            except Exception as e:
                if _is_rate_limit(e) and attempt < self.config.max_retries:
                    backoff = 2 ** (attempt + 1)
                    logger.warning(f"Rate limit hit, retry {attempt+1}/{self.config.max_retries} in {backoff}s")
                    self._pause(backoff, cancel_token)
                    continue
                raise

            result = ""
            for block in message.content:
                if hasattr(block, "text"):
                    result += block.text
            return result.strip()

        # Unreachable: the last attempt either returns or raises
        raise RuntimeError("Claude request failed after retries")
