"""OpenAI chat completion provider."""

from src.config.settings import get_settings
from src.providers.base import UpstreamProvider
from src.proxy.errors import UpstreamError


class OpenAIProvider(UpstreamProvider):
    """Sends a message history to the chat completions API and returns the
    first reply."""

    name = "openai"

    def _build_headers(self) -> dict:
        settings = get_settings()
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {settings.openai_api_key}",
        }

    async def complete(self, messages: list[dict]) -> str:
        settings = get_settings()
        upstream_url = f"{settings.openai_base_url.rstrip('/')}/v1/chat/completions"
        body = {
            "model": settings.openai_model,
            "messages": messages,
            "temperature": settings.openai_temperature,
            "max_tokens": settings.openai_max_tokens,
        }

        data = await self._request_json("POST", upstream_url, json=body, headers=self._build_headers())
        return _extract_reply(data)


def _extract_reply(data) -> str:
    """Pull choices[0].message.content, rejecting any other shape."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        raise UpstreamError(OpenAIProvider.name, "response has no reply content")
    if not isinstance(content, str) or not content:
        raise UpstreamError(OpenAIProvider.name, "response has no reply content")
    return content
