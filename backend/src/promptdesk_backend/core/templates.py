from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .assembler import SECTION_KEYS, used_variable_names
from .config import settings, resolve_project_path


log = logging.getLogger("promptdesk.core.templates")

BUNDLED_TEMPLATES_PATH = Path(__file__).resolve().parents[1] / "data" / "prompt_templates.yaml"


@dataclass(frozen=True)
class TemplateVariable:
    name: str
    description: str
    default_value: str


@dataclass(frozen=True)
class PromptTemplate:
    id: str
    title: str
    category: str
    description: str
    sections: Dict[str, str]
    variable_definitions: List[TemplateVariable] = field(default_factory=list)

    def as_definition(self) -> Dict[str, Any]:
        """Wire shape shared with saved prompts (camelCase variable keys)."""
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "description": self.description,
            "sections": dict(self.sections),
            "variableDefinitions": [
                {"name": v.name, "description": v.description, "defaultValue": v.default_value}
                for v in self.variable_definitions
            ],
        }


@dataclass(frozen=True)
class TemplateCatalog:
    version: int
    templates: List[PromptTemplate]


class TemplateStore:
    """Read-only catalog of starter prompts loaded from a YAML file."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._cache: TemplateCatalog | None = None
        self._cache_mtime: float | None = None

    def list(self) -> list[PromptTemplate]:
        return list(self._load_catalog().templates)

    def get(self, template_id: str) -> PromptTemplate:
        for template in self._load_catalog().templates:
            if template.id == template_id:
                return template
        raise KeyError(f"Template not found: {template_id}")

    def _load_catalog(self) -> TemplateCatalog:
        if not self.path.exists():
            raise FileNotFoundError(f"Template file not found: {self.path}")
        mtime = self.path.stat().st_mtime
        if self._cache is not None and self._cache_mtime == mtime:
            return self._cache
        catalog = self._parse_raw(self._read_raw())
        self._cache = catalog
        self._cache_mtime = mtime
        log.info("Template catalog loaded: %d templates (version=%d)", len(catalog.templates), catalog.version)
        return catalog

    def _read_raw(self) -> Dict[str, Any]:
        with self.path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError("Invalid template file (root is not a mapping).")
        return data

    def _parse_raw(self, raw: Dict[str, Any]) -> TemplateCatalog:
        version = raw.get("version")
        if not isinstance(version, int):
            raise ValueError("Invalid template file (missing version).")
        items = raw.get("templates")
        if not isinstance(items, list):
            raise ValueError("Invalid template file (missing templates list).")

        templates: list[PromptTemplate] = []
        seen: set[str] = set()
        for item in items:
            if not isinstance(item, dict):
                raise ValueError("Invalid template entry (not a mapping).")
            template_id = item.get("id")
            if not isinstance(template_id, str) or not template_id.strip():
                raise ValueError("Invalid template id.")
            if template_id in seen:
                raise ValueError(f"Duplicate template id: {template_id}")
            seen.add(template_id)
            title = item.get("title")
            if not isinstance(title, str) or not title.strip():
                raise ValueError(f"Missing title for template '{template_id}'.")

            raw_sections = item.get("sections") or {}
            if not isinstance(raw_sections, dict):
                raise ValueError(f"Invalid sections for template '{template_id}'.")
            unknown = sorted(set(raw_sections) - set(SECTION_KEYS))
            if unknown:
                raise ValueError(f"Template '{template_id}' has unknown sections: {', '.join(unknown)}")
            sections = {key: str(raw_sections.get(key) or "") for key in SECTION_KEYS}

            variables = [
                TemplateVariable(
                    name=str(v.get("name") or ""),
                    description=str(v.get("description") or ""),
                    default_value=str(v.get("defaultValue") or ""),
                )
                for v in (item.get("variableDefinitions") or [])
                if isinstance(v, dict)
            ]
            declared = {v.name for v in variables}
            undeclared = sorted(set(used_variable_names(sections)) - declared)
            if undeclared:
                log.warning("Template '%s' uses undeclared variables: %s", template_id, ", ".join(undeclared))

            templates.append(
                PromptTemplate(
                    id=template_id,
                    title=title.strip(),
                    category=str(item.get("category") or ""),
                    description=str(item.get("description") or "").strip(),
                    sections=sections,
                    variable_definitions=variables,
                )
            )
        return TemplateCatalog(version=version, templates=templates)


@lru_cache
def get_template_store() -> TemplateStore:
    if settings.templates_path:
        path = Path(resolve_project_path(settings.templates_path))
    else:
        path = BUNDLED_TEMPLATES_PATH
    return TemplateStore(path)
