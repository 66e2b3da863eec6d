"""OpenAI Responses API client for food photo analysis."""

import json
import logging
from dataclasses import dataclass

from openai import AsyncOpenAI

from macro_quest.services.vision import VisionClient

_SCHEMA_NAME = "food_analysis"

_logger = logging.getLogger(__name__)


@dataclass
class OpenAIVisionClient(VisionClient):
    """Vision client that asks the Responses API for a structured estimate."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIVisionClient":
        """Create a client with its own AsyncOpenAI connection pool."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Send one image with the prompt and return the parsed JSON object."""
        request = build_request(
            model=model,
            reasoning_effort=reasoning_effort,
            store=store,
            image_data_url=image_data_url,
            schema=schema,
            prompt=prompt,
        )
        response = await self.client.responses.create(**request)
        usage = getattr(response, "usage", None)
        if usage is not None:
            _logger.debug("OpenAI usage: model=%s usage=%s", model, usage)
        return parse_output(response.output_text)

    async def close(self) -> None:
        """Close the underlying OpenAI HTTP client."""
        await self.client.close()


def build_request(  # noqa: PLR0913
    *,
    model: str,
    reasoning_effort: str | None,
    store: bool,
    image_data_url: str,
    schema: dict[str, object],
    prompt: str,
) -> dict[str, object]:
    """Build Responses API arguments with a strict JSON schema output."""
    request: dict[str, object] = {
        "model": model,
        "input": [
            {
                "role": "user",
                "content": [
                    {"type": "input_text", "text": prompt},
                    {"type": "input_image", "image_url": image_data_url},
                ],
            }
        ],
        "text": {
            "format": {
                "type": "json_schema",
                "name": _SCHEMA_NAME,
                "strict": True,
                "schema": schema,
            }
        },
        "store": store,
    }
    if reasoning_effort:
        request["reasoning"] = {"effort": reasoning_effort}
    return request


def parse_output(output_text: str | None) -> dict[str, object]:
    """Decode the model output; anything but a JSON object is an error."""
    if not output_text:
        raise RuntimeError("OpenAI returned an empty response")
    try:
        parsed = json.loads(output_text)
    except json.JSONDecodeError as exc:
        raise RuntimeError("OpenAI returned invalid JSON") from exc
    if not isinstance(parsed, dict):
        raise RuntimeError("OpenAI returned a non-object JSON value")
    return parsed
