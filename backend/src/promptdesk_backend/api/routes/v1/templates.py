from fastapi import APIRouter, HTTPException

from ....core.templates import get_template_store
from ....schemas.prompts import TemplateResponse


router = APIRouter(prefix="/templates")


@router.get("", response_model=list[TemplateResponse])
def list_templates() -> list[TemplateResponse]:  # type: ignore[valid-type]
    store = get_template_store()
    try:
        templates = store.list()
    except FileNotFoundError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return [TemplateResponse.from_template(item) for item in templates]


@router.get("/{template_id}", response_model=TemplateResponse)
def get_template(template_id: str) -> TemplateResponse:  # type: ignore[valid-type]
    store = get_template_store()
    try:
        template = store.get(template_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Template not found") from exc
    except (FileNotFoundError, ValueError) as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return TemplateResponse.from_template(template)
