"""
AI room preview API routes: drive a staging session from room choice to result
"""
import base64

import structlog
from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.responses import Response

from core.exceptions import UPLOAD_FAILURE_MESSAGE
from schemas.preview import (
    CreateSessionRequest,
    PlaceMarkerRequest,
    PointerRequest,
    SelectTemplateRequest,
    SessionStateResponse,
    SharePayloadResponse,
)
from services.catalog_service import catalog_service
from services.coordinate_mapper import ElementRect
from services.google_ai_service import google_ai_service
from services.session_store import session_store
from services.staging_session import StagingSession, StagingStage

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/preview", tags=["preview"])


def _get_session(session_id: str) -> StagingSession:
    session = session_store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Staging session {session_id} not found")
    return session


def _state(session: StagingSession) -> SessionStateResponse:
    return SessionStateResponse(**session.to_dict())


def _rejected(session: StagingSession, action: str) -> HTTPException:
    reason = "a preview is being generated" if session.is_processing else f"stage is {session.stage.value}"
    logger.info("action_rejected", action=action, reason=reason)
    return HTTPException(status_code=409, detail=f"Cannot {action} now: {reason}")


@router.post("/sessions", response_model=SessionStateResponse, status_code=201)
async def open_session(request: CreateSessionRequest):
    """Open the AI preview for a product"""
    product = catalog_service.get(request.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product {request.product_id} not found")
    return _state(session_store.create(product))


@router.get("/sessions/{session_id}", response_model=SessionStateResponse)
async def get_session(session_id: str):
    return _state(_get_session(session_id))


@router.post("/sessions/{session_id}/template", response_model=SessionStateResponse)
async def select_template(session_id: str, request: SelectTemplateRequest):
    session = _get_session(session_id)
    if request.url not in session.templates:
        raise HTTPException(status_code=400, detail="Template is not offered for this product's room")
    if not session.select_template(request.url):
        raise _rejected(session, "select a room")
    return _state(session)


@router.post("/sessions/{session_id}/upload", response_model=SessionStateResponse)
async def upload_room(session_id: str, file: UploadFile = File(...)):
    """Use the user's own room photo"""
    session = _get_session(session_id)
    if session.is_processing or session.stage != StagingStage.SELECTING_ROOM:
        raise _rejected(session, "upload a room")
    if not await session.upload_file(file):
        raise HTTPException(status_code=400, detail=session.error or UPLOAD_FAILURE_MESSAGE)
    return _state(session)


@router.post("/sessions/{session_id}/back", response_model=SessionStateResponse)
async def back_to_rooms(session_id: str):
    session = _get_session(session_id)
    if not session.back():
        raise _rejected(session, "go back")
    return _state(session)


@router.post("/sessions/{session_id}/marker", response_model=SessionStateResponse)
async def place_marker(session_id: str, request: PlaceMarkerRequest):
    session = _get_session(session_id)
    rect = ElementRect(**request.rect.model_dump())
    if not session.place_marker_at_pointer(request.client_x, request.client_y, rect):
        raise _rejected(session, "place a marker")
    return _state(session)


@router.post("/sessions/{session_id}/process", response_model=SessionStateResponse)
async def process_preview(session_id: str):
    """
    Generate the composite. Holds the request open while the model works.
    Failures come back as a 200 state with `error` set and the session still
    in marker placement, so the client can retry.
    """
    session = _get_session(session_id)
    if session.is_processing or session.stage != StagingStage.PLACING_MARKER:
        raise _rejected(session, "start a preview")
    if session.room_image is None or session.marker is None:
        raise HTTPException(status_code=409, detail="Choose a room and mark a position first")

    if await session.process():
        logger.info("preview_generated", product_id=session.product.product_id)
    else:
        logger.warning("preview_failed", product_id=session.product.product_id, error=session.error)
    return _state(session)


@router.post("/sessions/{session_id}/retry", response_model=SessionStateResponse)
async def retry_position(session_id: str):
    session = _get_session(session_id)
    if not session.retry_position():
        raise _rejected(session, "retry position")
    return _state(session)


@router.post("/sessions/{session_id}/focus", response_model=SessionStateResponse)
async def toggle_focus(session_id: str):
    session = _get_session(session_id)
    if session.toggle_focus() is None:
        raise _rejected(session, "toggle focus")
    return _state(session)


@router.post("/sessions/{session_id}/pan/start", response_model=SessionStateResponse)
async def start_pan(session_id: str, request: PointerRequest):
    session = _get_session(session_id)
    if not session.start_pan(request.client_x, request.client_y):
        raise HTTPException(status_code=409, detail="Panning needs the focused result view")
    return _state(session)


@router.post("/sessions/{session_id}/pan/move", response_model=SessionStateResponse)
async def move_pan(session_id: str, request: PointerRequest):
    session = _get_session(session_id)
    session.move_pan(request.client_x, request.client_y)
    return _state(session)


@router.post("/sessions/{session_id}/pan/end", response_model=SessionStateResponse)
async def end_pan(session_id: str):
    session = _get_session(session_id)
    session.end_pan()
    return _state(session)


@router.get("/sessions/{session_id}/download")
async def download_preview(session_id: str):
    """Save Photo: the result PNG as an attachment"""
    session = _get_session(session_id)
    preview = session.save()
    if preview is None:
        raise HTTPException(status_code=409, detail="No preview to save yet")
    return Response(
        content=preview.content,
        media_type=preview.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{preview.filename}"'},
    )


@router.get("/sessions/{session_id}/share", response_model=SharePayloadResponse)
async def share_preview(session_id: str):
    """Share payload for the client's native share sheet"""
    session = _get_session(session_id)
    payload = session.share_payload()
    if payload is None:
        raise HTTPException(status_code=409, detail="No preview to share yet")
    share_file = payload.files[0]
    return SharePayloadResponse(
        title=payload.title,
        text=payload.text,
        filename=share_file.filename,
        mime_type=share_file.mime_type,
        data=base64.b64encode(share_file.content).decode(),
    )


@router.delete("/sessions/{session_id}", status_code=204)
async def close_session(session_id: str):
    """Finish Preview / close the modal"""
    if not session_store.close(session_id):
        raise HTTPException(status_code=404, detail=f"Staging session {session_id} not found")
    return Response(status_code=204)


@router.get("/health")
async def preview_health():
    return await google_ai_service.health_check()
