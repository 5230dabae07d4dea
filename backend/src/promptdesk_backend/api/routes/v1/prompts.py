from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from ....core.config import settings
from ....core.database import get_session
from ....core.editor import PromptEditorState
from ....core.templates import get_template_store
from ....repositories.prompt_repository import PromptRepository
from ....schemas.prompts import (
    PreviewRequest,
    PreviewResponse,
    PromptCreateRequest,
    PromptResponse,
    PromptUpdateRequest,
)
from ....services.prompt_service import PromptService, build_preview


router = APIRouter(prefix="/prompts")


def _service(session: Session) -> PromptService:
    # Single implicit owner; there is no per-request user
    return PromptService(repo=PromptRepository(session), user_id=settings.default_user_id)


def _requested_changes(payload: PromptUpdateRequest) -> dict:
    provided = payload.model_fields_set
    changes: dict = {}
    for name in ("title", "category", "tags"):
        if name in provided:
            changes[name] = getattr(payload, name)
    if "sections" in provided:
        changes["sections"] = payload.sections.as_mapping() if payload.sections else None
    if "variable_definitions" in provided:
        changes["variable_definitions"] = [v.as_mapping() for v in payload.variable_definitions or []]
    return changes


@router.get("", response_model=list[PromptResponse])
def list_prompts(  # type: ignore[valid-type]
    session: Session = Depends(get_session),
) -> list[PromptResponse]:
    return [PromptResponse.from_model(item) for item in _service(session).list_prompts()]


@router.post("/preview", response_model=PreviewResponse)
def preview_prompt(payload: PreviewRequest) -> PreviewResponse:  # type: ignore[valid-type]
    preview = build_preview(
        sections=payload.sections.as_mapping(),
        variable_definitions=[v.as_mapping() for v in payload.variable_definitions],
        fill_values=payload.fill_values,
    )
    return PreviewResponse.from_preview(preview)


@router.get("/{prompt_id}", response_model=PromptResponse)
def get_prompt(  # type: ignore[valid-type]
    prompt_id: str,
    session: Session = Depends(get_session),
) -> PromptResponse:
    return PromptResponse.from_model(_service(session).get_prompt(prompt_id))


@router.post("", response_model=PromptResponse, status_code=status.HTTP_201_CREATED)
def create_prompt(  # type: ignore[valid-type]
    payload: PromptCreateRequest,
    session: Session = Depends(get_session),
) -> PromptResponse:
    prompt = _service(session).create_prompt(
        title=payload.title,
        category=payload.category,
        sections=payload.sections.as_mapping() if payload.sections else None,
        tags=payload.tags,
        variable_definitions=[v.as_mapping() for v in payload.variable_definitions or []],
    )
    session.commit()
    session.refresh(prompt)
    return PromptResponse.from_model(prompt)


@router.put("/{prompt_id}", response_model=PromptResponse)
def update_prompt(  # type: ignore[valid-type]
    prompt_id: str,
    payload: PromptUpdateRequest,
    session: Session = Depends(get_session),
) -> PromptResponse:
    prompt = _service(session).update_prompt(prompt_id, _requested_changes(payload))
    session.commit()
    session.refresh(prompt)
    return PromptResponse.from_model(prompt)


@router.delete("/{prompt_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_prompt(  # type: ignore[valid-type]
    prompt_id: str,
    session: Session = Depends(get_session),
) -> Response:
    _service(session).delete_prompt(prompt_id)
    session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/from-template/{template_id}",
    response_model=PromptResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_prompt_from_template(  # type: ignore[valid-type]
    template_id: str,
    session: Session = Depends(get_session),
) -> PromptResponse:
    try:
        template = get_template_store().get(template_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Template not found") from exc
    except (FileNotFoundError, ValueError) as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    payload = PromptEditorState.from_template(template.as_definition()).to_save_payload()
    prompt = _service(session).create_prompt(
        title=payload["title"],
        category=payload["category"],
        sections=payload["sections"],
        tags=payload["tags"],
        variable_definitions=payload["variableDefinitions"],
    )
    session.commit()
    session.refresh(prompt)
    return PromptResponse.from_model(prompt)
