"""Handlebars prompt rendering for LLM-assisted story writing."""

from collections.abc import Callable, Sequence
from typing import Any

import pybars

from endless_tale.graph import AdventureGraph

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


# ── Custom Handlebars helpers ────────────────────────────


def _helper_last(this, options, items, count):
    """{{#last array N}}...{{/last}} — iterate over the last N items."""
    result = []
    for item in list(items)[-int(count):]:
        result.extend(options["fn"](item))
    return result


_HELPERS: dict[str, Callable] = {
    "last": _helper_last,
}


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context, helpers=_HELPERS))
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e


def build_story_context(
    graph: AdventureGraph,
    path: Sequence[str],
    choice_text: str,
    story_text: str,
) -> dict[str, Any]:
    """Template variables for writing the segment that follows path.

    history is the walk so far, one block per segment: the choice quoted
    with "> " followed by its story text. Ids missing from the graph are
    skipped.
    """
    segments = [
        {"index": i, "choice_text": node.choice_text, "story_text": node.story_text}
        for i, node in graph.segments(path)
    ]
    history_parts: list[str] = []
    for seg in segments:
        history_parts.append(f"> {seg['choice_text']}")
        history_parts.append(seg["story_text"])
        history_parts.append("")

    return {
        "choice_text": choice_text,
        "story_text": story_text,
        "segments": segments,
        "depth": len(segments),
        "history": "\n".join(history_parts).rstrip("\n"),
    }
