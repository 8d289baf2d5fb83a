"""Language-model estimator shared by every pipeline stage."""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from string import Template
from typing import Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from calorie_logger.domain.errors import (
    MALFORMED_OUTPUT,
    SERVICE_UNAVAILABLE,
    EstimatorError,
)
from calorie_logger.services.rate_limit import NoopLimiter, RateLimiter

_logger = logging.getLogger(__name__)

_OPENERS = {list: "[", dict: "{"}

ModelT = TypeVar("ModelT", bound=BaseModel)


class TextGenerationClient(Protocol):
    """Interface for a chat-style text generation service."""

    async def generate(
        self, *, model: str, prompt: str, temperature: float | None
    ) -> str:
        """Return the raw text produced for a prompt."""


@dataclass
class LanguageModelEstimator:
    """Renders prompts, calls the model once and extracts the JSON answer."""

    client: TextGenerationClient
    model: str
    temperature: float | None = 0.2
    rate_limiter: RateLimiter = field(default_factory=NoopLimiter)

    async def query(
        self,
        template: Template,
        variables: Mapping[str, object],
        expect: type[list] | type[dict],
    ) -> list | dict:
        """Send one prompt and return the first JSON value of the expected shape."""
        prompt = template.substitute(
            {key: str(value) for key, value in variables.items()}
        )
        await self.rate_limiter.acquire()
        try:
            text = await self.client.generate(
                model=self.model, prompt=prompt, temperature=self.temperature
            )
        except Exception as exc:
            _logger.warning("Language model call failed: %s", type(exc).__name__)
            raise EstimatorError(SERVICE_UNAVAILABLE) from exc

        value = extract_json(text, expect)
        if value is None:
            _logger.warning("Language model returned no usable %s", expect.__name__)
            _logger.debug("Unparseable model output: %s", text)
            raise EstimatorError(MALFORMED_OUTPUT, raw=text)
        return value

    async def query_model(
        self,
        template: Template,
        variables: Mapping[str, object],
        schema: type[ModelT],
        expect: type[list] | type[dict] = dict,
    ) -> ModelT:
        """Query the model and validate the answer against a stage schema."""
        value = await self.query(template, variables, expect)
        try:
            return schema.model_validate(value)
        except ValidationError as exc:
            _logger.warning(
                "Language model output failed %s validation", schema.__name__
            )
            raise EstimatorError(MALFORMED_OUTPUT, raw=json.dumps(value)) from exc


def extract_json(
    text: str | None, expect: type[list] | type[dict]
) -> list | dict | None:
    """Return the first well-formed JSON array or object embedded in text.

    Prose and Markdown fences around the value are ignored. Candidates that
    fail to parse are skipped and scanning resumes after them.
    """
    if not text:
        return None
    opener = _OPENERS[expect]
    decoder = json.JSONDecoder()
    position = text.find(opener)
    while position != -1:
        try:
            value, _ = decoder.raw_decode(text, position)
        except json.JSONDecodeError:
            value = None
        except RecursionError:
            # Nesting too deep to decode; later openers sit inside the same run.
            return None
        if isinstance(value, expect):
            return value
        position = text.find(opener, position + 1)
    return None
