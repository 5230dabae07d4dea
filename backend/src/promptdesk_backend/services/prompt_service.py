from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from fastapi import HTTPException, status

from ..core.assembler import SECTION_KEYS
from ..core.editor import PromptEditorState, PromptPreview
from ..models.saved_prompt import SavedPrompt
from ..repositories.prompt_repository import PromptRepository


log = logging.getLogger("promptdesk.services.prompts")


def _normalize_sections(sections: Mapping[str, Any] | None) -> dict[str, str]:
    raw = sections or {}
    return {key: str(raw.get(key) or "") for key in SECTION_KEYS}


def _require_title(title: str | None) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title is required")
    return cleaned


class PromptService:
    def __init__(self, repo: PromptRepository, user_id: str):
        self.repo = repo
        self.user_id = user_id

    # --- Public API ----------------------------------------------------
    def list_prompts(self) -> list[SavedPrompt]:
        return self.repo.list_for_user(self.user_id)

    def get_prompt(self, prompt_id: str) -> SavedPrompt:
        prompt = self.repo.get_for_user(prompt_id, self.user_id)
        if prompt is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Prompt not found")
        return prompt

    def create_prompt(
        self,
        *,
        title: str | None,
        category: str | None = None,
        sections: Mapping[str, Any] | None = None,
        tags: str | None = None,
        variable_definitions: Iterable[Mapping[str, Any]] | None = None,
    ) -> SavedPrompt:
        return self.repo.create(
            user_id=self.user_id,
            title=_require_title(title),
            category=category or "",
            sections=_normalize_sections(sections),
            tags=tags or "",
            variable_definitions=[dict(item) for item in (variable_definitions or [])],
        )

    def update_prompt(self, prompt_id: str, changes: Mapping[str, Any]) -> SavedPrompt:
        """Apply the provided fields only; absent keys keep their stored value."""
        prompt = self.get_prompt(prompt_id)
        fields: dict[str, Any] = {}
        if "title" in changes:
            fields["title"] = _require_title(changes["title"])
        if "category" in changes:
            fields["category"] = changes["category"] or ""
        if "sections" in changes:
            fields["sections"] = _normalize_sections(changes["sections"])
        if "tags" in changes:
            fields["tags"] = changes["tags"] or ""
        if "variable_definitions" in changes:
            fields["variable_definitions"] = [dict(item) for item in (changes["variable_definitions"] or [])]
        return self.repo.update(prompt, **fields)

    def delete_prompt(self, prompt_id: str) -> None:
        prompt = self.get_prompt(prompt_id)
        self.repo.delete(prompt)


def build_preview(
    *,
    sections: Mapping[str, Any],
    variable_definitions: Iterable[Mapping[str, Any]],
    fill_values: Mapping[str, str] | None = None,
) -> PromptPreview:
    """Assemble an unsaved definition the way the editor renders it."""
    state = PromptEditorState.from_prompt(
        {"sections": sections, "variableDefinitions": list(variable_definitions)}
    )
    if fill_values is not None:
        state.fill_values = dict(fill_values)
    preview = state.preview()
    log.debug(
        "Preview built (chars=%d, tokens=%d, hints=%d)",
        preview.estimate.char_count,
        preview.estimate.estimated_tokens,
        len(preview.hints),
    )
    return preview
