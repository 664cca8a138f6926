from __future__ import annotations

from typing import Any, List, Optional

import httpx
from fastapi import Body, Depends, FastAPI, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from pydantic import BaseModel, ConfigDict, Field

from app.dependencies import get_conversation_store, get_current_owner_id, get_http_client
from config.settings import Settings, get_settings
from conversation.models import ConversationRecord
from conversation.store import DEFAULT_LIST_LIMIT, ConversationStore
from core.errors import NotFoundError, VoicelogError
from voiceproxy.proxy import RealtimeRequest, RealtimeResponse, create_client_secret


logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s - %(message)s")
logger = logging.getLogger("voicelog")

app = FastAPI(title="Voicelog", version="1.0.0")

# CORS: allow local frontend during development
settings = get_settings()
if settings.app_env.lower() in {"dev", "development", "local"}:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(VoicelogError)
def handle_voicelog_error(request: Request, exc: VoicelogError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


class SaveConversationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(..., description="Transcript with '[user]: ' and '[AI]: ' lines")
    debug_logs: Optional[List[Any]] = Field(default=None, alias="debugLogs")


@app.post("/api/realtime", response_model=RealtimeResponse)
def realtime_session(
    req: Optional[RealtimeRequest] = Body(default=None),
    settings: Settings = Depends(get_settings),
    http_client: httpx.Client = Depends(get_http_client),
):
    req = req or RealtimeRequest()
    logger.info(
        "Incoming realtime session request: language=%s custom_prompt=%s",
        req.language,
        bool(req.custom_prompt),
    )
    try:
        return create_client_secret(req, settings, http_client)
    except VoicelogError:
        raise
    except Exception as e:
        logger.exception("Realtime session failed: %s", e)
        return JSONResponse(status_code=500, content={"error": str(e) or "Internal server error"})


@app.post("/api/conversations", response_model=ConversationRecord, status_code=201)
def save_conversation(
    req: SaveConversationRequest,
    owner_id: str = Depends(get_current_owner_id),
    store: ConversationStore = Depends(get_conversation_store),
):
    return store.save(owner_id, req.text, req.debug_logs)


@app.get("/api/conversations", response_model=List[ConversationRecord])
def list_conversations(
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1, le=200),
    owner_id: str = Depends(get_current_owner_id),
    store: ConversationStore = Depends(get_conversation_store),
):
    return store.list_by_owner(owner_id, limit=limit)


def _owned_conversation(store: ConversationStore, conversation_id: str, owner_id: str) -> ConversationRecord:
    record = store.get_by_id(conversation_id)
    if record.owner_id != owner_id:
        # Don't reveal other owners' ids
        raise NotFoundError(f"Conversation {conversation_id} not found")
    return record


@app.get("/api/conversations/{conversation_id}", response_model=ConversationRecord)
def get_conversation(
    conversation_id: str,
    owner_id: str = Depends(get_current_owner_id),
    store: ConversationStore = Depends(get_conversation_store),
):
    return _owned_conversation(store, conversation_id, owner_id)


@app.delete("/api/conversations/{conversation_id}", status_code=204)
def delete_conversation(
    conversation_id: str,
    owner_id: str = Depends(get_current_owner_id),
    store: ConversationStore = Depends(get_conversation_store),
):
    _owned_conversation(store, conversation_id, owner_id)
    store.delete_by_id(conversation_id)
    return Response(status_code=204)


@app.get("/health")
def health():
    return {"status": "ok"}
