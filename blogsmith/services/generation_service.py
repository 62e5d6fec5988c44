"""
Generation gateway.

Builds a prompt from a topic and style, asks the configured OpenAI model(s)
for a JSON ``{"title", "content"}`` object, and either returns fully valid
content or raises GenerationFailed. Models in the roster are tried in order,
once each; provider error text is logged and never returned to callers.
"""

import json
import logging
import re
from typing import Any, List, Optional

from openai import OpenAIError
from pydantic import BaseModel

from blogsmith.core.exceptions import GenerationFailed, ValidationError

logger = logging.getLogger(__name__)

WORD_COUNTS = {"short": 300, "medium": 600, "long": 1200}
DEFAULT_LENGTH = "medium"

SYSTEM_PROMPT = (
    "You are a professional writer creating high-quality blog posts. "
    "Your output should be well-structured, engaging, and informative."
)

PROMPT_TEMPLATE = """\
Write a blog post about "{topic}" in a {style} style.
The post should be approximately {words} words.
Structure it with a catchy title, an introduction, a body with relevant sections, and a conclusion.
Write at least five paragraphs separated by blank lines.
Respond with a JSON object with exactly two string fields: "title" and "content".
The title must not start with "Title:".
"""

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)
_TITLE_PREFIX_RE = re.compile(r"^\s*title\s*:\s*", re.IGNORECASE)
_QUOTE_PAIRS = {"\"": "\"", "'": "'", "`": "`", "“": "”", "‘": "’"}


class GeneratedContent(BaseModel):
    title: str
    content: str


def build_prompt(topic: str, style: str, length: str = DEFAULT_LENGTH) -> str:
    """Render the user prompt, validating inputs first"""
    topic = (topic or "").strip()
    style = (style or "").strip()
    if not topic or not style:
        raise ValidationError("Please provide topic and style")
    if length not in WORD_COUNTS:
        raise ValidationError(f"length must be one of: {', '.join(WORD_COUNTS)}")
    return PROMPT_TEMPLATE.format(topic=topic, style=style, words=WORD_COUNTS[length])


def _strip_quote_pair(title: str) -> str:
    # Only a matching open/close pair wrapping the whole title counts
    if len(title) >= 2 and _QUOTE_PAIRS.get(title[0]) == title[-1]:
        return title[1:-1].strip()
    return title


def clean_title(title: str) -> str:
    """Strip a spurious "Title:" prefix and surrounding quotes, e.g. 'Title: "X"' -> 'X'"""
    title = title.strip()
    previous = None
    while previous != title:
        previous = title
        title = _strip_quote_pair(_TITLE_PREFIX_RE.sub("", title).strip())
    return title


def parse_generated_content(
    raw: Optional[str],
    min_title_length: int = 1,
    min_content_length: int = 1,
) -> GeneratedContent:
    """
    Parse provider output into GeneratedContent.

    Raises ValueError when the text is not a JSON object with usable string
    ``title`` and ``content`` fields.
    """
    if not raw or not raw.strip():
        raise ValueError("Empty response from provider")

    text = raw.strip()
    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)

    # json.JSONDecodeError is a ValueError
    data: Any = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("Provider response is not a JSON object")

    title = data.get("title")
    content = data.get("content")
    if not isinstance(title, str) or not isinstance(content, str):
        raise ValueError("Provider response is missing title or content")

    title = clean_title(title)
    content = content.strip()
    if len(title) < max(min_title_length, 1):
        raise ValueError(f"Title shorter than {min_title_length} characters")
    if len(content) < max(min_content_length, 1):
        raise ValueError(f"Content shorter than {min_content_length} characters")

    return GeneratedContent(title=title, content=content)


class GenerationGateway:
    """Calls an OpenAI-compatible client over an ordered model roster."""

    def __init__(
        self,
        client: Any,
        models: List[str],
        max_tokens: int = 2000,
        temperature: float = 0.7,
        timeout: float = 60.0,
        min_title_length: int = 4,
        min_content_length: int = 20,
    ) -> None:
        self._client = client
        self._models = list(models)
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._timeout = timeout
        self._min_title_length = min_title_length
        self._min_content_length = min_content_length

    @property
    def models(self) -> List[str]:
        return list(self._models)

    def _call_provider(self, model: str, prompt: str) -> Optional[str]:
        response = self._client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            response_format={"type": "json_object"},
            max_tokens=self._max_tokens,
            temperature=self._temperature,
            timeout=self._timeout,
        )
        choice = response.choices[0] if response.choices else None
        if choice is None or choice.message is None:
            return None
        return choice.message.content

    def generate(self, topic: str, style: str, length: str = DEFAULT_LENGTH) -> GeneratedContent:
        """Return valid generated content or raise GenerationFailed"""
        prompt = build_prompt(topic, style, length)

        if self._client is None or not self._models:
            logger.error("Generation requested but no provider is configured")
            raise GenerationFailed()

        for model in self._models:
            logger.info(f"Requesting generation from {model}")
            try:
                raw = self._call_provider(model, prompt)
                content = parse_generated_content(
                    raw,
                    min_title_length=self._min_title_length,
                    min_content_length=self._min_content_length,
                )
            except OpenAIError as e:
                logger.warning(f"Provider call to {model} failed: {e}")
                continue
            except ValueError as e:
                logger.warning(f"Unusable response from {model}: {e}")
                continue
            return content

        raise GenerationFailed()
