from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from ..core.editor import PromptPreview
    from ..core.templates import PromptTemplate
    from ..models.saved_prompt import SavedPrompt


class PromptSections(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    role: str | None = None
    context: str | None = None
    task: str | None = None
    constraints: str | None = None
    output_format: str | None = Field(default=None, alias="outputFormat")

    def as_mapping(self) -> dict[str, str]:
        """Section texts keyed like the stored JSON (``outputFormat``)."""
        return {key: value or "" for key, value in self.model_dump(by_alias=True).items()}


class VariableDefinitionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    name: str = ""
    description: str = ""
    default_value: str = Field(default="", alias="defaultValue")

    def as_mapping(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)


class PromptCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    # Blank titles are rejected by the service with a 400, not by validation
    title: str | None = None
    category: str | None = None
    sections: PromptSections | None = None
    tags: str | None = None
    variable_definitions: list[VariableDefinitionPayload] | None = Field(
        default=None, alias="variableDefinitions"
    )


class PromptUpdateRequest(PromptCreateRequest):
    """Partial update: only fields present in the request body are applied."""


class PromptResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    id: str
    user_id: str = Field(alias="userId")
    title: str
    category: str
    sections: dict[str, Any]
    tags: str
    variable_definitions: list[dict[str, Any]] = Field(alias="variableDefinitions")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    @classmethod
    def from_model(cls, prompt: "SavedPrompt") -> "PromptResponse":
        return cls(
            id=prompt.id,
            user_id=prompt.user_id,
            title=prompt.title,
            category=prompt.category or "",
            sections=dict(prompt.sections or {}),
            tags=prompt.tags or "",
            variable_definitions=list(prompt.variable_definitions or []),
            created_at=prompt.created_at,
            updated_at=prompt.updated_at,
        )


class TemplateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    id: str
    title: str
    category: str
    description: str
    sections: dict[str, str]
    variable_definitions: list[VariableDefinitionPayload] = Field(alias="variableDefinitions")

    @classmethod
    def from_template(cls, template: "PromptTemplate") -> "TemplateResponse":
        return cls(
            id=template.id,
            title=template.title,
            category=template.category,
            description=template.description,
            sections=dict(template.sections),
            variable_definitions=[
                VariableDefinitionPayload(
                    name=v.name,
                    description=v.description,
                    default_value=v.default_value,
                )
                for v in template.variable_definitions
            ],
        )


class PreviewRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    sections: PromptSections = Field(default_factory=PromptSections)
    variable_definitions: list[VariableDefinitionPayload] = Field(
        default_factory=list, alias="variableDefinitions"
    )
    # Omitted: each variable's defaultValue is used, as when the editor loads a prompt
    fill_values: dict[str, str] | None = Field(default=None, alias="fillValues")


class HintItem(BaseModel):
    type: Literal["warn", "ok"]
    text: str


class PreviewResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    text: str
    char_count: int = Field(alias="charCount")
    estimated_tokens: int = Field(alias="estimatedTokens")
    hints: list[HintItem]

    @classmethod
    def from_preview(cls, preview: "PromptPreview") -> "PreviewResponse":
        return cls(
            # UTF-8 cannot carry lone surrogates; counts still reflect the real text
            text=preview.text.encode("utf-8", "replace").decode("utf-8"),
            char_count=preview.estimate.char_count,
            estimated_tokens=preview.estimate.estimated_tokens,
            hints=[HintItem(type=h.type, text=h.text) for h in preview.hints],
        )
