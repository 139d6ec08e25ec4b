"""Text generation: send prompts to Gemini and turn replies into topics or blog content."""

import asyncio
import json
import logging
import re
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from blogai.core.errors import UpstreamFailure

if TYPE_CHECKING:
    from blogai.core.config import Settings

logger = logging.getLogger(__name__)

TOPIC_COUNT = 5
RETRY_BACKOFF_SEC = 1.5

_NUMBERING = re.compile(r"^\s*(?:\d+[.)]|[-*•])\s*")
_QUOTES = "\"'“”"


class TextGenerator:
    """Prompt in, text out. Retries transport errors and 5xx responses with linear backoff."""

    def __init__(
        self,
        api_key: str | None,
        model: str,
        base_url: str,
        timeout_sec: float = 60.0,
        max_retries: int = 2,
        backoff_sec: float = RETRY_BACKOFF_SEC,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_sec = timeout_sec
        self.max_retries = max_retries
        self.backoff_sec = backoff_sec

    @classmethod
    def from_settings(cls, settings: "Settings") -> "TextGenerator":
        api_key = settings.GEMINI_API_KEY.get_secret_value() if settings.GEMINI_API_KEY else None
        return cls(
            api_key=api_key,
            model=settings.GEMINI_MODEL,
            base_url=settings.GEMINI_BASE_URL,
            timeout_sec=settings.GEMINI_REQUEST_TIMEOUT_SEC,
            max_retries=settings.GEMINI_MAX_RETRIES,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def complete(self, prompt: str, json_output: bool = False) -> str:
        """Return the model's text for prompt. Raises UpstreamFailure on any failure."""
        if not self.api_key:
            raise UpstreamFailure("Text generation is not configured (GEMINI_API_KEY is unset).")

        url = f"{self.base_url}/models/{self.model}:generateContent"
        generation_config: dict[str, Any] = {"temperature": 0.9}
        if json_output:
            generation_config["responseMimeType"] = "application/json"
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        timeout = httpx.Timeout(self.timeout_sec)
        attempts = self.max_retries + 1
        last_error = "unknown error"
        cause: Exception | None = None
        start = time.perf_counter()

        for attempt in range(attempts):
            try:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.post(
                        url,
                        json=payload,
                        headers={"x-goog-api-key": self.api_key},
                    )
            except httpx.TimeoutException as e:
                last_error = "Gemini request timed out."
                cause = e
            except httpx.HTTPError as e:
                last_error = "Gemini is unreachable."
                cause = e
            else:
                if response.status_code == 200:
                    text = _extract_text(response)
                    logger.info(
                        "Text generation completed",
                        extra={
                            "llm_latency_seconds": time.perf_counter() - start,
                            "model": self.model,
                            "attempts": attempt + 1,
                        },
                    )
                    return text
                last_error = f"Gemini returned status {response.status_code}."
                cause = None
                if response.status_code < 500:
                    break

            if attempt < attempts - 1:
                await asyncio.sleep(self.backoff_sec * (attempt + 1))

        logger.info(
            "Text generation failed",
            extra={
                "llm_latency_seconds": time.perf_counter() - start,
                "model": self.model,
                "status": "error",
                "reason": last_error,
            },
        )
        raise UpstreamFailure(last_error, cause=cause)


def _extract_text(response: httpx.Response) -> str:
    """Pull candidates[0].content.parts[*].text out of a generateContent reply."""
    try:
        body = response.json()
    except json.JSONDecodeError as e:
        raise UpstreamFailure("Gemini response body is not valid JSON.", cause=e) from e
    candidates = body.get("candidates") if isinstance(body, dict) else None
    if not candidates:
        raise UpstreamFailure("Gemini response has no candidates.")
    parts = ((candidates[0] or {}).get("content") or {}).get("parts") or []
    text = "".join(str(p.get("text", "")) for p in parts if isinstance(p, dict))
    if not text.strip():
        raise UpstreamFailure("Gemini response has no text.")
    return text


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        if lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines)
    return text.strip()


def _clean_title(line: str) -> str:
    return _NUMBERING.sub("", line).strip().strip(_QUOTES).strip()


def parse_topics(text: str, limit: int = TOPIC_COUNT) -> list[str]:
    """
    Parse model output into at most `limit` topic titles.

    Accepts a JSON array of strings, a JSON object (its values are used), or
    free text with one title per line (numbering, bullets and quotes stripped).
    """
    cleaned = _strip_code_fence(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        parsed = None

    if isinstance(parsed, dict):
        parsed = list(parsed.values())
    if isinstance(parsed, list):
        topics = [_clean_title(str(item)) for item in parsed if isinstance(item, (str, int, float))]
    else:
        lines = [line for line in cleaned.splitlines() if line.strip()]
        # Free text usually opens with a lead-in sentence ending in ':'.
        topics = [_clean_title(line) for line in lines if not line.rstrip().endswith(":")]
    return [t for t in topics if t][:limit]


def build_topics_prompt(topic: str, keywords: str | None = None) -> str:
    prompt = (
        f'Generate exactly {TOPIC_COUNT} engaging, creative, and specific blog post ideas '
        f'about "{topic}".'
    )
    if keywords and keywords.strip():
        prompt += f" Include these keywords where appropriate: {keywords.strip()}."
    prompt += (
        f" Format the output as a JSON array of {TOPIC_COUNT} strings, with no additional"
        " text or explanation. Each title should be concise but descriptive."
    )
    return prompt


@dataclass(frozen=True)
class TopicsResult:
    topics: list[str]
    partial: bool


async def generate_topics(
    generator: TextGenerator,
    topic: str,
    keywords: str | None = None,
) -> TopicsResult:
    """Ask for five blog ideas. Zero parsed ideas is an UpstreamFailure; fewer than five is partial."""
    text = await generator.complete(build_topics_prompt(topic, keywords), json_output=True)
    topics = parse_topics(text)
    if not topics:
        raise UpstreamFailure("Failed to generate topics with the AI model")
    return TopicsResult(topics=topics, partial=len(topics) < TOPIC_COUNT)


async def generate_draft(generator: TextGenerator, title: str) -> str:
    prompt = (
        f'Write the opening draft of a blog post titled "{title}". Use a short '
        "introduction followed by two or three sections in plain paragraphs. "
        "Return only the post body, without the title or any commentary."
    )
    return _strip_code_fence(await generator.complete(prompt))


async def improve_content(generator: TextGenerator, content: str) -> str:
    prompt = (
        "Improve the following blog post for clarity, flow and engagement while "
        "keeping the author's voice and meaning. Return only the improved post.\n\n"
        f"{content}"
    )
    return _strip_code_fence(await generator.complete(prompt))
