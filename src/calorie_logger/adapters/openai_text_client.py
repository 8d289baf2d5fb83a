"""OpenAI Responses API client for free-text generation."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from calorie_logger.services.estimator import TextGenerationClient


@dataclass
class OpenAITextClient(TextGenerationClient):
    """Text generation client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str, timeout_seconds: float = 10.0) -> "OpenAITextClient":
        """Create an OpenAI text client without SDK-level retries."""
        return cls(
            client=AsyncOpenAI(
                api_key=api_key, timeout=timeout_seconds, max_retries=0
            )
        )

    async def generate(
        self, *, model: str, prompt: str, temperature: float | None
    ) -> str:
        """Send a single prompt and return the raw output text."""
        request_payload: dict[str, object] = {
            "model": model,
            "input": [{"role": "user", "content": prompt}],
            "store": False,
        }
        if temperature is not None:
            request_payload["temperature"] = temperature

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return output_text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
