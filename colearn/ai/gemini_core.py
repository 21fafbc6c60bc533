"""
Gemini API key manager.
Keys: primary (course generation, chat, arena), tutor, backup.
"""

import logging
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Tuple

import google.generativeai as genai

from colearn.errors import AIServiceError

logger = logging.getLogger(__name__)

TUTOR_KEY_ORDER = ("tutor", "primary", "backup")


@dataclass
class TokenUsage:
    """Track token usage per key"""
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass
class KeyStats:
    """Usage stats for one API key (in-process only)"""
    key_name: str
    requests_today: int = 0
    total_requests_lifetime: int = 0
    failures: int = 0
    last_error: Optional[str] = None
    last_reset: datetime = field(default_factory=datetime.now)
    tokens_today: TokenUsage = field(default_factory=TokenUsage)
    tokens_lifetime: TokenUsage = field(default_factory=TokenUsage)

    def _roll_day(self):
        if self.last_reset.date() != datetime.now().date():
            self.requests_today = 0
            self.tokens_today = TokenUsage()
            self.last_reset = datetime.now()

    def record_request(self, input_tokens: int, output_tokens: int):
        """Record a successful request with token usage"""
        self._roll_day()
        self.requests_today += 1
        self.total_requests_lifetime += 1
        self.tokens_today.input_tokens += input_tokens
        self.tokens_today.output_tokens += output_tokens
        self.tokens_lifetime.input_tokens += input_tokens
        self.tokens_lifetime.output_tokens += output_tokens

    def record_failure(self, error: str):
        self.failures += 1
        self.last_error = error

    def to_dict(self) -> dict:
        return {
            "key_name": self.key_name,
            "requests_today": self.requests_today,
            "total_requests_lifetime": self.total_requests_lifetime,
            "failures": self.failures,
            "last_error": self.last_error,
            "tokens_today": asdict(self.tokens_today),
            "tokens_lifetime": asdict(self.tokens_lifetime),
        }


class GeminiKeyManager:
    """
    Runs prompts against Gemini with named API keys.

    genai.configure() is process-global, so configure + generate happen
    under one lock. Calls are blocking; async callers use asyncio.to_thread.
    """

    def __init__(self, keys: Dict[str, str], model_name: str = "gemini-2.5-flash"):
        """
        Args:
            keys: key name -> API key; empty keys are skipped
            model_name: Gemini model to use
        """
        self.keys = {name: key for name, key in keys.items() if key}
        self.model_name = model_name
        self.lock = threading.RLock()
        self.stats: Dict[str, KeyStats] = {name: KeyStats(key_name=name) for name in self.keys}

        if not self.keys:
            logger.warning("No Gemini API keys configured; AI features will fail")

    @property
    def configured(self) -> bool:
        return bool(self.keys)

    def _estimate_tokens(self, text: str) -> int:
        """Rough token estimation (4 chars ≈ 1 token)"""
        return len(text) // 4

    def _generate(self, api_key: str, prompt: str) -> Tuple[Any, str]:
        with self.lock:
            genai.configure(api_key=api_key)
            model = genai.GenerativeModel(self.model_name)
            response = model.generate_content(prompt)
        return response, response.text

    def run_gemini(self, prompt: str, key_names: Iterable[str] = ("primary",)) -> str:
        """
        Execute prompt, trying each named key in order until one succeeds.

        Raises:
            AIServiceError: If no key is configured or every key fails
        """
        last_error = None
        tried = 0
        seen = set()
        for key_name in key_names:
            api_key = self.keys.get(key_name)
            # fallback keys default to the primary one; try each key once
            if not api_key or api_key in seen:
                continue
            seen.add(api_key)
            tried += 1
            stats = self.stats[key_name]

            try:
                response, text = self._generate(api_key, prompt)
            except Exception as e:
                with self.lock:
                    stats.record_failure(str(e))
                logger.warning("Gemini call with %s key failed: %s", key_name, e)
                last_error = e
                continue

            input_tokens = self._estimate_tokens(prompt)
            output_tokens = self._estimate_tokens(text)
            usage = getattr(response, "usage_metadata", None)
            if usage is not None:
                input_tokens = getattr(usage, "prompt_token_count", input_tokens) or input_tokens
                output_tokens = getattr(usage, "candidates_token_count", output_tokens) or output_tokens

            with self.lock:
                stats.record_request(input_tokens, output_tokens)
            logger.debug(
                "Gemini %s key | Daily: %s | Tokens: %s+%s",
                key_name, stats.requests_today, input_tokens, output_tokens,
            )
            return text.strip()

        if tried == 0:
            raise AIServiceError("AI service is not configured")
        raise AIServiceError(f"AI request failed: {last_error}")

    def get_stats(self) -> Dict[str, dict]:
        """Current usage statistics per key"""
        with self.lock:
            return {name: stats.to_dict() for name, stats in self.stats.items()}
