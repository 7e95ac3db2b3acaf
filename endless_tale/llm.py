"""LLM-assisted writing — reader-side configuration and the streaming client.

The reader's own provider settings (base URL, key, model, prompt templates)
live in a local JSON file and are never stored on the server. Generation
goes through the backend's ``POST /api/llm`` proxy, which relays an
OpenAI-compatible chat-completion stream as server-sent events:

    data: {"choices": [{"delta": {"content": "The door"}}]}
    data: {"choices": [{"delta": {"content": " creaks."}}]}
    data: [DONE]

LlmStreamClient.stream() yields the content deltas as they arrive.
"""

from __future__ import annotations

import enum
import json
import logging
from collections.abc import AsyncIterator, Sequence
from pathlib import Path

import httpx
from pydantic import BaseModel, ValidationError

from endless_tale.graph import AdventureGraph
from endless_tale.prompts import build_story_context, render_prompt

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Providers and defaults
# ---------------------------------------------------------------------------

class LlmProvider(str, enum.Enum):
    OPENAI = "OpenAI"
    OPENROUTER = "OpenRouter"
    DEEPSEEK = "DeepSeek"
    GROQ = "Groq"
    CUSTOM = "Custom"

    @property
    def base_url(self) -> str:
        return _PROVIDER_DEFAULTS[self][0]

    @property
    def default_model(self) -> str:
        return _PROVIDER_DEFAULTS[self][1]

    @property
    def display_name(self) -> str:
        return self.value


_PROVIDER_DEFAULTS: dict[LlmProvider, tuple[str, str]] = {
    LlmProvider.OPENAI: ("https://api.openai.com/v1", "gpt-4o-mini"),
    LlmProvider.OPENROUTER: ("https://openrouter.ai/api/v1", "moonshotai/kimi-k2.5"),
    LlmProvider.DEEPSEEK: ("https://api.deepseek.com/v1", "deepseek-chat"),
    LlmProvider.GROQ: ("https://api.groq.com/openai/v1", "llama-3.1-8b-instant"),
    LlmProvider.CUSTOM: ("", ""),
}

_STYLE = """\
Style: Write in a natural, lean, grounded voice. Avoid ornamental prose and \
dramatic flair. Write concrete sentences. Don't include irrelevant, \
unimportant details, actions or observations. Advance and progress the story.\
"""

DEFAULT_PROMPT_NEW_STORY = f"""\
You are writing the opening segment of a text adventure story.

The premise is: "{{{{{{choice_text}}}}}}"

{{{{{{story_text}}}}}}


{_STYLE}
Write the opening segment. Set the scene and establish the atmosphere. \
This is the start of an endless story. Write only the narrative text — no \
choices or options at the end.\
"""

DEFAULT_PROMPT_CONTINUING = f"""\
You are continuing a text adventure story presented as a series of segments. \
Each segment begins with the choice that led to it.

Return a short response. 2-4 paragraphs (about 50-150 words) unless \
specified to be longer.

{_STYLE}


the story so far:
{{{{{{history}}}}}}

Choice selected: "{{{{{{choice_text}}}}}}"

Details about what should happen: "{{{{{{story_text}}}}}}"

Write only the narrative text for this segment — no choices or options at \
the end.
"""


class LlmConfig(BaseModel):
    provider: LlmProvider = LlmProvider.OPENAI
    api_base_url: str = LlmProvider.OPENAI.base_url
    api_key: str = ""
    model: str = LlmProvider.OPENAI.default_model
    llm_enabled: bool = False
    prompt_new_story: str = DEFAULT_PROMPT_NEW_STORY
    prompt_continuing: str = DEFAULT_PROMPT_CONTINUING

    def with_provider(self, provider: LlmProvider) -> LlmConfig:
        """Switch provider, resetting base URL and model to its defaults."""
        return self.model_copy(update={
            "provider": provider,
            "api_base_url": provider.base_url,
            "model": provider.default_model,
        })


def load_llm_config(path: Path) -> LlmConfig:
    """Read the reader's config; a missing or unreadable file gives defaults."""
    if not path.is_file():
        return LlmConfig()
    try:
        return LlmConfig.model_validate_json(path.read_text())
    except ValidationError as e:
        logger.warning("Ignoring invalid LLM config at %s: %s", path, e)
        return LlmConfig()


def save_llm_config(path: Path, config: LlmConfig) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(config.model_dump_json(indent=2))


def build_generation_prompt(
    config: LlmConfig,
    graph: AdventureGraph,
    path: Sequence[str],
    choice_text: str,
    story_text: str,
) -> str:
    """Render the opening-segment template for an empty path, else the continuation one."""
    template = config.prompt_new_story if not path else config.prompt_continuing
    return render_prompt(template, build_story_context(graph, path, choice_text, story_text))


# ---------------------------------------------------------------------------
# LlmStreamClient — talks to the backend proxy
# ---------------------------------------------------------------------------

class LlmStreamClient:
    """Streams generated text through the backend's LLM proxy.

    Args:
        proxy_base_url: Backend base URL, e.g. "http://localhost:8080".
        timeout:        HTTP timeout in seconds. Defaults to 60.
        transport:      Optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        proxy_base_url: str,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = f"{proxy_base_url.rstrip('/')}/api/llm"
        self._timeout = timeout
        self._transport = transport

    async def stream(
        self,
        config: LlmConfig,
        prompt: str,
        max_tokens: int = 1024,
        temperature: float = 0.8,
    ) -> AsyncIterator[str]:
        body = {
            "api_base_url": config.api_base_url,
            "api_key": config.api_key,
            "model": config.model,
            "prompt": prompt,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        logger.debug("llm stream model=%s prompt_len=%d", config.model, len(prompt))

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                async with client.stream("POST", self._url, json=body) as resp:
                    if resp.is_error:
                        await resp.aread()
                        raise LLMError(_error_message(resp))
                    async for line in resp.aiter_lines():
                        content = parse_sse_line(line)
                        if content:
                            yield content
        except httpx.TimeoutException as e:
            raise LLMError(f"LLM proxy timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise LLMError(f"Stream failed: {e}") from e

    async def complete(self, config: LlmConfig, prompt: str, **kwargs) -> str:
        """Collect the whole stream into one string."""
        parts = [chunk async for chunk in self.stream(config, prompt, **kwargs)]
        return "".join(parts)


def parse_sse_line(line: str) -> str | None:
    """Extract the content delta from one ``data:`` line, if any."""
    if not line.startswith("data: "):
        return None
    data = line[len("data: "):].strip()
    if data == "[DONE]":
        return None
    try:
        parsed = json.loads(data)
        return parsed["choices"][0]["delta"].get("content") or None
    except (ValueError, KeyError, IndexError, TypeError, AttributeError):
        return None


def _error_message(resp: httpx.Response) -> str:
    try:
        error = resp.json().get("error")
    except (ValueError, AttributeError):
        error = None
    return error or f"HTTP {resp.status_code}"


# ---------------------------------------------------------------------------
# LLMError — raised for all proxy and stream failures
# ---------------------------------------------------------------------------

class LLMError(RuntimeError):
    """Raised when the LLM proxy cannot be reached or returns an error."""
