from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, List, Mapping

from .assembler import SECTION_KEYS, Hint, PromptEstimate, assemble, compute_hints, estimate


log = logging.getLogger("promptdesk.core.editor")

COPY_SUFFIX = " (copy)"

_FIELD_ALIASES = {
    "name": "name",
    "description": "description",
    "default_value": "default_value",
    "defaultValue": "default_value",
}


class DuplicateVariableError(ValueError):
    """Raised when a rename would give two variables the same name."""


@dataclass
class VariableDefinition:
    name: str = ""
    description: str = ""
    default_value: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "VariableDefinition":
        default = data.get("defaultValue", data.get("default_value"))
        return cls(
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            default_value=str(default or ""),
        )


@dataclass(frozen=True)
class PromptPreview:
    text: str
    estimate: PromptEstimate
    hints: List[Hint]


@dataclass
class PromptEditorState:
    """Mutable editing session for one prompt definition.

    The caller owns the instance; every read (``preview``, ``copy_text``,
    ``to_save_payload``) recomputes from the current fields.
    """

    title: str = ""
    category: str = ""
    tags: str = ""
    sections: Dict[str, str] = field(default_factory=lambda: {key: "" for key in SECTION_KEYS})
    variables: List[VariableDefinition] = field(default_factory=list)
    fill_values: Dict[str, str] = field(default_factory=dict)

    # --- Construction --------------------------------------------------
    @classmethod
    def empty(cls) -> "PromptEditorState":
        return cls()

    @classmethod
    def from_prompt(cls, data: Mapping[str, Any]) -> "PromptEditorState":
        state = cls()
        state._populate(data)
        return state

    @classmethod
    def from_template(cls, data: Mapping[str, Any]) -> "PromptEditorState":
        state = cls()
        state._populate({**data, "title": f"{data.get('title') or ''}{COPY_SUFFIX}"})
        return state

    def _populate(self, data: Mapping[str, Any]) -> None:
        self.title = str(data.get("title") or "")
        self.category = str(data.get("category") or "")
        self.tags = str(data.get("tags") or "")
        raw_sections = data.get("sections") or {}
        self.sections = {key: str(raw_sections.get(key) or "") for key in SECTION_KEYS}
        raw_vars = data.get("variableDefinitions", data.get("variable_definitions")) or []
        self.variables = [VariableDefinition.from_mapping(item) for item in raw_vars]
        self.fill_values = {}
        for var in self.variables:
            self.fill_values[var.name] = var.default_value or ""

    # --- Sections ------------------------------------------------------
    def set_section(self, key: str, text: str) -> None:
        if key not in SECTION_KEYS:
            raise KeyError(f"Unknown section: {key}")
        self.sections[key] = text

    def section_snapshot(self) -> Dict[str, str]:
        return {key: (self.sections.get(key) or "").strip() for key in SECTION_KEYS}

    # --- Variables -----------------------------------------------------
    def add(self) -> int:
        self.variables.append(VariableDefinition())
        return len(self.variables) - 1

    def update(self, index: int, field_name: str, value: str) -> None:
        if not 0 <= index < len(self.variables):
            return
        attr = _FIELD_ALIASES.get(field_name)
        if attr is None:
            raise ValueError(f"Unknown variable field: {field_name}")
        var = self.variables[index]
        if attr != "name":
            setattr(var, attr, value)
            return

        # Compared stripped, the way names are saved
        stripped = value.strip()
        if stripped and any(other.name.strip() == stripped for i, other in enumerate(self.variables) if i != index):
            log.debug("Rename rejected: variable %r already exists", value)
            raise DuplicateVariableError(f"Variable '{value}' is already defined.")
        old_name = var.name
        var.name = value
        fill_value = self.fill_values.pop(old_name, "") or ""
        self.fill_values[value] = fill_value

    def remove(self, index: int) -> None:
        if not 0 <= index < len(self.variables):
            return
        name = self.variables.pop(index).name
        if name:
            self.fill_values.pop(name, None)

    def fill(self, name: str, value: str) -> None:
        self.fill_values[name] = value

    def fillable_variables(self) -> List[VariableDefinition]:
        return [var for var in self.variables if var.name.strip()]

    # --- Derived views -------------------------------------------------
    def preview(self) -> PromptPreview:
        sections = self.section_snapshot()
        text = assemble(sections, self.fill_values)
        return PromptPreview(
            text=text,
            estimate=estimate(text),
            hints=compute_hints(sections, self.variables),
        )

    def copy_text(self) -> str | None:
        """Return the text to hand to the clipboard, or None when there is nothing to copy."""
        text = assemble(self.section_snapshot(), self.fill_values)
        return text if text.strip() else None

    def to_save_payload(self) -> Dict[str, Any]:
        return {
            "title": self.title.strip(),
            "category": self.category,
            "tags": self.tags.strip(),
            "sections": self.section_snapshot(),
            "variableDefinitions": [
                {
                    "name": var.name.strip(),
                    "description": var.description or "",
                    "defaultValue": self.fill_values.get(var.name) or "",
                }
                for var in self.fillable_variables()
            ],
        }
