from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from ..models.saved_prompt import SavedPrompt


log = logging.getLogger("promptdesk.repositories.prompt")

_UPDATABLE_FIELDS = ("title", "category", "sections", "tags", "variable_definitions")


class PromptRepository:
    def __init__(self, session: Session):
        self.session = session

    def list_for_user(self, user_id: str) -> list[SavedPrompt]:
        items = (
            self.session.query(SavedPrompt)
            .filter(SavedPrompt.user_id == user_id)
            .order_by(SavedPrompt.updated_at.desc(), SavedPrompt.created_at.desc())
            .all()
        )
        log.debug("Loaded %d prompts (user_id=%s)", len(items), user_id)
        return items

    def get_for_user(self, prompt_id: str, user_id: str) -> SavedPrompt | None:
        return (
            self.session.query(SavedPrompt)
            .filter(SavedPrompt.id == prompt_id, SavedPrompt.user_id == user_id)
            .one_or_none()
        )

    def create(
        self,
        *,
        user_id: str,
        title: str,
        category: str = "",
        sections: dict[str, Any] | None = None,
        tags: str = "",
        variable_definitions: list[dict[str, Any]] | None = None,
    ) -> SavedPrompt:
        prompt = SavedPrompt(
            user_id=user_id,
            title=title,
            category=category,
            sections=dict(sections or {}),
            tags=tags,
            variable_definitions=list(variable_definitions or []),
        )
        self.session.add(prompt)
        # Flush so id and timestamps are populated for the response
        self.session.flush()
        log.info("Prompt created (id=%s, user_id=%s, title=%s)", prompt.id, user_id, title)
        return prompt

    def update(self, prompt: SavedPrompt, **fields: Any) -> SavedPrompt:
        unknown = sorted(set(fields) - set(_UPDATABLE_FIELDS))
        if unknown:
            raise ValueError(f"Unknown prompt fields: {', '.join(unknown)}")
        for name, value in fields.items():
            setattr(prompt, name, value)
        prompt.updated_at = datetime.now(timezone.utc)
        self.session.flush()
        log.info("Prompt updated (id=%s, fields=%s)", prompt.id, ",".join(sorted(fields)) or "-")
        return prompt

    def delete(self, prompt: SavedPrompt) -> None:
        self.session.delete(prompt)
        self.session.flush()
        log.info("Prompt deleted (id=%s)", prompt.id)
