"""Quillnote — FastAPI app for personal notes with AI enhancement.

Loads config.yaml on startup. Exposes /ai/enhance (SSE streaming or a
single JSON result), note CRUD with search and pagination, per-user
analytics, and operational endpoints for health, config viewing and
hot-reload.
"""

from __future__ import annotations

import logging
from contextlib import aclosing, asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse

from quillnote.ai.relay import EnhancementRelay
from quillnote.config import get_config, load_config, reload_config
from quillnote.errors import QuillnoteError
from quillnote.notes import analytics
from quillnote.notes.store import NoteStore
from quillnote.schemas import EnhanceRequest, EnhancementResult, Note, NoteCreate, NoteUpdate

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PREVIEW_CHARS = 200


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load config and create the note store on startup."""
    config = load_config()
    app.state.notes = NoteStore()
    logger.info(
        f"Quillnote started (origins={config.allowed_origins}, "
        f"auth={'enabled' if config.api_key else 'disabled'}, "
        f"model={config.ai.model}, "
        f"ai={'enabled' if config.ai.api_key else 'disabled'})"
    )
    yield
    logger.info("Quillnote shutting down")


# Load config early so we can read allowed_origins for CORS middleware.
_boot_config = load_config()

app = FastAPI(title="Quillnote", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_boot_config.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(QuillnoteError)
async def handle_service_error(request: Request, exc: QuillnoteError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


async def verify_api_key(request: Request) -> None:
    """Validate X-API-Key header against the configured key.
    If no api_key is set in config, auth is disabled (dev mode).
    """
    config = get_config()
    if not config.api_key:
        return  # Auth disabled — no key configured

    key = request.headers.get("X-API-Key")
    if key != config.api_key:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")


async def current_user_id(request: Request) -> int:
    """User id asserted by the upstream identity provider."""
    raw = request.headers.get("X-User-Id", "")
    if not raw.isdigit():
        raise HTTPException(status_code=401, detail="Missing or invalid X-User-Id")
    return int(raw)


def get_store(request: Request) -> NoteStore:
    return request.app.state.notes


def get_relay() -> EnhancementRelay:
    return EnhancementRelay(get_config().ai)


def _preview(note: Note) -> dict:
    data = note.model_dump()
    if len(note.content) > PREVIEW_CHARS:
        data["content"] = note.content[:PREVIEW_CHARS] + "..."
    return data


# ---------------------------------------------------------------------------
# AI enhancement
# ---------------------------------------------------------------------------


@app.post("/ai/enhance", dependencies=[Depends(verify_api_key)])
async def enhance(body: EnhanceRequest, relay: EnhancementRelay = Depends(get_relay)):
    """Summarize, improve or tag content via the upstream model.

    With ``stream`` set the answer is sent as Server-Sent Events
    (``data: {"content": ...}`` lines, then ``data: [DONE]``).
    """
    outcome = await relay.enhance(body)

    if isinstance(outcome, EnhancementResult):
        status = 502 if outcome.error else 200
        return JSONResponse(status_code=status, content=outcome.model_dump(exclude_none=True))

    async def stream():
        async with aclosing(outcome) as events:
            async for event in events:
                yield event.to_sse()

    return StreamingResponse(
        stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------


@app.get("/notes", dependencies=[Depends(verify_api_key)])
async def list_notes(
    search: str | None = None,
    page: int = Query(1, ge=1),
    per_page: int | None = Query(None, ge=1),
    user_id: int = Depends(current_user_id),
    store: NoteStore = Depends(get_store),
):
    config = get_config()
    size = min(per_page or config.per_page, config.max_per_page)
    result = store.list(user_id, search=search, page=page, per_page=size)
    data = result.model_dump()
    data["items"] = [_preview(n) for n in result.items]
    return data


@app.get("/notes/{note_id}", dependencies=[Depends(verify_api_key)])
async def show_note(
    note_id: int,
    user_id: int = Depends(current_user_id),
    store: NoteStore = Depends(get_store),
) -> Note:
    return store.get(user_id, note_id)


@app.post("/notes", status_code=201, dependencies=[Depends(verify_api_key)])
async def create_note(
    body: NoteCreate,
    user_id: int = Depends(current_user_id),
    store: NoteStore = Depends(get_store),
) -> Note:
    return store.create(user_id, body)


@app.put("/notes/{note_id}", dependencies=[Depends(verify_api_key)])
async def update_note(
    note_id: int,
    body: NoteUpdate,
    user_id: int = Depends(current_user_id),
    store: NoteStore = Depends(get_store),
) -> Note:
    return store.update(user_id, note_id, body)


@app.delete("/notes/{note_id}", status_code=204, dependencies=[Depends(verify_api_key)])
async def delete_note(
    note_id: int,
    user_id: int = Depends(current_user_id),
    store: NoteStore = Depends(get_store),
) -> Response:
    store.delete(user_id, note_id)
    return Response(status_code=204)


@app.get("/analytics", dependencies=[Depends(verify_api_key)])
async def note_analytics(
    user_id: int = Depends(current_user_id),
    store: NoteStore = Depends(get_store),
):
    return analytics.summarize(store.notes_for(user_id))


# ---------------------------------------------------------------------------
# Operational endpoints
# ---------------------------------------------------------------------------


@app.get("/health")
async def health():
    """Liveness check."""
    config = get_config()
    return {
        "status": "healthy",
        "ai_configured": bool(config.ai.api_key),
        "model": config.ai.model,
    }


@app.get("/config", dependencies=[Depends(verify_api_key)])
async def get_current_config():
    """Return current config as JSON, secrets removed."""
    config = get_config()
    return config.model_dump(exclude={"api_key": True, "ai": {"api_key"}})


@app.post("/reload", dependencies=[Depends(verify_api_key)])
async def reload():
    """Hot-reload config.yaml without container restart."""
    try:
        new_config = reload_config()
    except Exception as e:
        logger.error(f"Reload failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Reload failed: {e}")
    return {"status": "reloaded", "model": new_config.ai.model}
