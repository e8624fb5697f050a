"""Message template endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query, Response

from herald.api.deps import ApiKey, AppSettings, Restorer, Store
from herald.schemas.templates import (
    CreateTemplateRequest,
    TemplateInfo,
    TemplateListResponse,
    UpdateTemplateRequest,
    VersionInfo,
    VersionListResponse,
)

# Routes nested under an outgoing intent
intent_templates_router = APIRouter()

# Routes addressed by template id alone
templates_router = APIRouter()


@intent_templates_router.get(
    "/{intent_id}/message-templates",
    response_model=TemplateListResponse,
    summary="List message templates of an intent",
)
async def list_templates(
    intent_id: int,
    api_key: ApiKey,
    store: Store,
    settings: AppSettings,
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1),
) -> TemplateListResponse:
    size = min(page_size or settings.templates.page_size, settings.templates.max_page_size)
    templates = await store.list(intent_id, page=page, page_size=size)
    return TemplateListResponse(
        templates=[TemplateInfo.from_template(t) for t in templates],
        total=await store.count(intent_id),
        page=page,
        page_size=size,
    )


@intent_templates_router.post(
    "/{intent_id}/message-templates",
    response_model=TemplateInfo,
    status_code=201,
    summary="Create message template",
)
async def create_template(
    intent_id: int, body: CreateTemplateRequest, api_key: ApiKey, store: Store
) -> TemplateInfo:
    template = await store.create(intent_id, body.model_dump())
    return TemplateInfo.from_template(template)


@intent_templates_router.get(
    "/{intent_id}/message-templates/{template_id}",
    response_model=TemplateInfo,
    summary="Get message template with its latest version",
)
async def get_template(
    intent_id: int, template_id: int, api_key: ApiKey, store: Store
) -> TemplateInfo:
    return TemplateInfo.from_template(await store.fetch(template_id))


@intent_templates_router.patch(
    "/{intent_id}/message-templates/{template_id}",
    summary="Update message template",
)
async def update_template(
    intent_id: int,
    template_id: int,
    body: UpdateTemplateRequest,
    api_key: ApiKey,
    store: Store,
) -> Response:
    # Unknown ids are accepted without error
    await store.update(template_id, body.model_dump(exclude_unset=True), intent_id=intent_id)
    return Response(status_code=200)


@intent_templates_router.delete(
    "/{intent_id}/message-templates/{template_id}",
    summary="Delete message template",
)
async def delete_template(
    intent_id: int, template_id: int, api_key: ApiKey, store: Store
) -> Response:
    await store.delete(template_id, intent_id=intent_id)
    return Response(status_code=200)


@templates_router.get(
    "/{template_id}/versions",
    response_model=VersionListResponse,
    summary="List recorded versions of a template",
)
async def list_versions(template_id: int, api_key: ApiKey, store: Store) -> VersionListResponse:
    versions = await store.versions.history(template_id)
    return VersionListResponse(
        versions=[VersionInfo.from_snapshot(v) for v in versions],
        total=len(versions),
    )


@templates_router.post(
    "/{template_id}/restore/{version_id}",
    response_model=TemplateInfo,
    summary="Restore a template to a previous version",
)
async def restore_template(
    template_id: int, version_id: int, api_key: ApiKey, restorer: Restorer
) -> TemplateInfo:
    template = await restorer.restore(template_id, version_id)
    return TemplateInfo.from_template(template)
