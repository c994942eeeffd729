"""OpenAI Chat Completions client for food image analysis."""

from dataclasses import dataclass

import httpx
from openai import AsyncOpenAI, OpenAIError

from food_analyzer.domain.errors import UpstreamFailure
from food_analyzer.services.analysis import ModelClient


@dataclass
class OpenAIChatClient(ModelClient):
    """Model client backed by the OpenAI Chat Completions API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str, timeout_seconds: float) -> "OpenAIChatClient":
        """Create an OpenAI client with a managed httpx session."""
        http_client = httpx.AsyncClient(timeout=timeout_seconds)
        return cls(client=AsyncOpenAI(api_key=api_key, http_client=http_client))

    async def complete(
        self,
        *,
        model: str,
        prompt: str,
        image_data_url: str,
        max_tokens: int,
    ) -> str:
        """Send the image with the instruction prompt and return raw text."""
        try:
            response = await self.client.chat.completions.create(
                model=model,
                max_tokens=max_tokens,
                messages=[
                    {"role": "system", "content": prompt},
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "text",
                                "text": "Please analyze this food photo.",
                            },
                            {
                                "type": "image_url",
                                "image_url": {"url": image_data_url},
                            },
                        ],
                    },
                ],
            )
        except (OpenAIError, httpx.HTTPError) as exc:
            raise UpstreamFailure(f"Model call failed: {exc}") from exc
        if not response.choices:
            raise UpstreamFailure("Model returned no choices")
        return response.choices[0].message.content or ""

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
