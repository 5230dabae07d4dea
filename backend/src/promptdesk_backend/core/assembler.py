from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Any, Dict, Iterable, List, Literal, Mapping


SECTION_KEYS: tuple[str, ...] = ("role", "context", "task", "constraints", "outputFormat")

SECTION_LABELS: Dict[str, str] = {
    "role": "ROLE",
    "context": "CONTEXT",
    "task": "TASK",
    "constraints": "CONSTRAINTS",
    "outputFormat": "OUTPUT FORMAT",
}

CHARS_PER_TOKEN = 4

# Word characters only: names such as ``my-var`` are substituted by
# ``assemble`` but never reported as used here.
_VARIABLE_TOKEN_RE = re.compile(r"\{\{(\w+)\}\}")

HintType = Literal["warn", "ok"]


@dataclass(frozen=True)
class Hint:
    type: HintType
    text: str


@dataclass(frozen=True)
class PromptEstimate:
    char_count: int
    estimated_tokens: int


def _section_text(sections: Mapping[str, Any], key: str) -> str:
    value = sections.get(key)
    return value if isinstance(value, str) else ""


def _variable_name(item: Any) -> str:
    if isinstance(item, Mapping):
        raw = item.get("name")
    else:
        raw = getattr(item, "name", None)
    return raw if isinstance(raw, str) else ""


def assemble(sections: Mapping[str, Any], fill_values: Mapping[str, str]) -> str:
    """Build the prompt text from ``sections`` and substitute ``{{name}}`` tokens.

    Sections are emitted in the fixed ``SECTION_KEYS`` order as
    ``[LABEL]\\n<text>`` blocks separated by a blank line; empty sections are
    skipped. Each fill value then replaces every literal ``{{name}}``
    occurrence, in the mapping's iteration order. An empty value yields the
    ``[FILL: name]`` placeholder. Tokens with no matching fill value are left
    untouched.
    """
    parts: list[str] = []
    for key in SECTION_KEYS:
        text = _section_text(sections, key)
        if text:
            parts.append(f"[{SECTION_LABELS[key]}]\n{text}")
    assembled = "\n\n".join(parts)

    for name, value in fill_values.items():
        if not name:
            continue
        filled = value or f"[FILL: {name}]"
        assembled = assembled.replace("{{" + name + "}}", filled)
    return assembled


def used_variable_names(sections: Mapping[str, Any]) -> List[str]:
    """Return every ``{{word}}`` token name found in the sections, duplicates included."""
    all_text = " ".join(_section_text(sections, key) for key in SECTION_KEYS)
    return [m.group(1) for m in _VARIABLE_TOKEN_RE.finditer(all_text)]


def compute_hints(sections: Mapping[str, Any], variable_definitions: Iterable[Any]) -> List[Hint]:
    role = _section_text(sections, "role")
    context = _section_text(sections, "context")
    task = _section_text(sections, "task")
    constraints = _section_text(sections, "constraints")
    output_format = _section_text(sections, "outputFormat")

    hints: list[Hint] = []
    if not role:
        hints.append(Hint("warn", "Add a Role to define who or what this agent is."))
    if not task:
        hints.append(Hint("warn", "Add a Task section — this is the most important part."))
    if not context and not constraints:
        hints.append(Hint("warn", "Consider adding Context or Constraints for better results."))
    if not output_format:
        hints.append(Hint("warn", "Add an Output Format to improve response consistency."))

    defined = {name for name in (_variable_name(item) for item in variable_definitions) if name}
    undefined = list(dict.fromkeys(name for name in used_variable_names(sections) if name not in defined))
    if undefined:
        noun = "Variables" if len(undefined) > 1 else "Variable"
        listed = ", ".join("{{" + name + "}}" for name in undefined)
        hints.append(Hint("warn", f"{noun} used but not defined: {listed}"))

    if not hints:
        hints.append(Hint("ok", "Prompt looks good! All key sections are filled."))
    return hints


def estimate(text: str) -> PromptEstimate:
    # UTF-16 code units, so characters outside the BMP count twice and a
    # lone surrogate counts once.
    char_count = len(text.encode("utf-16-le", "surrogatepass")) // 2
    return PromptEstimate(
        char_count=char_count,
        estimated_tokens=-(-char_count // CHARS_PER_TOKEN),
    )
