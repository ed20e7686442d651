import logging
import os
from typing import Any, Dict, Iterator, List

from fastapi import Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from notepad.schemas import NoteCreate, NoteRecord, NoteUpdate
from notepad.store import CREATE_FAILED, NoteStore

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Health", "description": "Service health and readiness endpoints."},
    {"name": "Notes", "description": "CRUD operations for notes."},
]

app = FastAPI(
    title="Notepad API",
    description="Notepad backend API supporting CRUD operations over a SQLite notes store.",
    version="1.0.0",
    openapi_tags=openapi_tags,
)


def _parse_allowed_origins() -> List[str]:
    """
    Parse comma-separated ALLOWED_ORIGINS from env.

    Falls back to localhost dev origins when not set.
    """
    raw = (os.getenv("ALLOWED_ORIGINS") or "").strip()
    if not raw:
        return ["http://localhost:3000", "http://127.0.0.1:3000"]

    origins = [o.strip() for o in raw.split(",")]
    return [o for o in origins if o]


def _parse_allowed_origin_regex() -> str | None:
    """Optional ALLOWED_ORIGIN_REGEX override; unset means exact origins only."""
    raw = (os.getenv("ALLOWED_ORIGIN_REGEX") or "").strip()
    return raw or None


app.add_middleware(
    CORSMiddleware,
    allow_origins=_parse_allowed_origins(),
    allow_origin_regex=_parse_allowed_origin_regex(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return JSON for unexpected errors (storage failures, coding errors)."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"},
    )


# PUBLIC_INTERFACE
def get_store() -> Iterator[NoteStore]:
    """FastAPI dependency that yields an open note store and ensures it is closed."""
    store = NoteStore().open()
    try:
        yield store
    finally:
        store.close()


@app.on_event("startup")
def _startup_init_schema() -> None:
    """
    Create (or upgrade) the notes table.

    Do NOT fail application startup if the database file is unusable;
    /health/db reports readiness.
    """
    try:
        with NoteStore():
            pass
    except Exception:
        logger.exception("Notes database initialization failed during startup.")


def _load_note(store: NoteStore, note_id: int) -> NoteRecord:
    with store.fetch_note(note_id) as cursor:
        note = cursor.current
    if note is None:
        raise HTTPException(status_code=404, detail="Note not found")
    return note


# PUBLIC_INTERFACE
@app.get("/", tags=["Health"], summary="Health check", description="Returns a simple health payload.")
def health_check() -> Dict[str, str]:
    """Health check endpoint used by previews/monitoring."""
    return {"message": "Healthy"}


# PUBLIC_INTERFACE
@app.get(
    "/health/db",
    tags=["Health"],
    summary="Database health check",
    description=(
        "Opens the notes database and reads its schema version. "
        "Returns status=up when that succeeds, otherwise status=down with error details."
    ),
)
def health_check_db() -> Dict[str, Any]:
    """Database readiness endpoint."""
    try:
        with NoteStore() as store:
            return {"status": "up", "schema_version": store.stored_version()}
    except Exception as exc:
        return {"status": "down", "error": str(exc)}


# PUBLIC_INTERFACE
@app.get(
    "/notes",
    response_model=List[NoteRecord],
    tags=["Notes"],
    summary="List notes",
    description="Return all notes in storage order.",
)
def list_notes(store: NoteStore = Depends(get_store)) -> List[NoteRecord]:
    """List all notes."""
    with store.fetch_all_notes() as cursor:
        return list(cursor)


# PUBLIC_INTERFACE
@app.post(
    "/notes",
    response_model=NoteRecord,
    status_code=status.HTTP_201_CREATED,
    tags=["Notes"],
    summary="Create note",
    description="Create a new note with a title and body.",
)
def create_note(payload: NoteCreate, store: NoteStore = Depends(get_store)) -> NoteRecord:
    """Create a note."""
    logger.info("Creating note title_len=%s body_len=%s", len(payload.title), len(payload.body))
    title = payload.title.strip()
    note_id = store.create_note(title, payload.body)
    if note_id == CREATE_FAILED:
        raise HTTPException(status_code=500, detail="Failed to create note")
    return NoteRecord(id=note_id, title=title, body=payload.body)


# PUBLIC_INTERFACE
@app.get(
    "/notes/{note_id}",
    response_model=NoteRecord,
    tags=["Notes"],
    summary="Get note",
    description="Fetch a single note by ID.",
)
def get_note(note_id: int, store: NoteStore = Depends(get_store)) -> NoteRecord:
    """Get a note by id."""
    return _load_note(store, note_id)


# PUBLIC_INTERFACE
@app.put(
    "/notes/{note_id}",
    response_model=NoteRecord,
    tags=["Notes"],
    summary="Update note",
    description="Update a note by ID (any omitted fields remain unchanged).",
)
def update_note(note_id: int, payload: NoteUpdate, store: NoteStore = Depends(get_store)) -> NoteRecord:
    """Update a note by id."""
    note = _load_note(store, note_id)
    title = payload.title.strip() if payload.title is not None else note.title
    body = payload.body if payload.body is not None else note.body

    if not store.update_note(note_id, title, body):
        raise HTTPException(status_code=500, detail="Failed to update note")
    return NoteRecord(id=note_id, title=title, body=body)


# PUBLIC_INTERFACE
@app.delete(
    "/notes/{note_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["Notes"],
    summary="Delete note",
    description="Delete a note by ID.",
)
def delete_note(note_id: int, store: NoteStore = Depends(get_store)) -> Response:
    """Delete a note by id."""
    _load_note(store, note_id)
    if not store.delete_note(note_id):
        raise HTTPException(status_code=500, detail="Failed to delete note")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
