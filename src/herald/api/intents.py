"""Outgoing intent endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query

from herald.api.deps import ApiKey, DBSession
from herald.schemas.intents import CreateIntentRequest, IntentInfo, IntentListResponse
from herald.services.intent_service import IntentService

router = APIRouter()


@router.post("", response_model=IntentInfo, status_code=201, summary="Create outgoing intent")
async def create_intent(body: CreateIntentRequest, api_key: ApiKey, db: DBSession) -> IntentInfo:
    return await IntentService(db).create_intent(body)


@router.get("", response_model=IntentListResponse, summary="List outgoing intents")
async def list_intents(
    api_key: ApiKey,
    db: DBSession,
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> IntentListResponse:
    return await IntentService(db).list_intents(offset=offset, limit=limit)


@router.get("/{intent_id}", response_model=IntentInfo, summary="Get outgoing intent")
async def get_intent(intent_id: int, api_key: ApiKey, db: DBSession) -> IntentInfo:
    return await IntentService(db).get_intent(intent_id)
