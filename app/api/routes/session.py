from fastapi import APIRouter, HTTPException, Depends, File, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response
from typing import Optional
import asyncio
import base64
import io
import os
import uuid

from app.models.session import (
    Adjustment, BoothSession, CollageSettings, CollageSettingsUpdate, SessionCreateRequest,
    SessionStatusResponse, PhotoCaptureResponse, ExportResponse
)
from app.services.camera import CameraService
from app.services.document import DocumentService
from app.services.photo import PhotoService
from app.services.websocket import WebSocketManager
from app.api.dependencies import get_camera_service, get_document_service, get_photo_service, get_websocket_manager
from app.config import settings
from app.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/session", tags=["session"])
active_sessions: dict = {}
current_session: Optional[str] = None


def _get_current_session() -> BoothSession:
    if current_session is None or current_session not in active_sessions:
        raise HTTPException(status_code=404, detail="No active session. Please create a session first.")
    return active_sessions[current_session]


def _check_slot(session: BoothSession, index: int):
    if index < 0 or index >= session.photo_count:
        raise HTTPException(status_code=400, detail="Invalid slot index")


def _status(session: BoothSession) -> SessionStatusResponse:
    return SessionStatusResponse(
        session_id=session.session_id,
        photo_count=session.photo_count,
        filled_slots=[slot is not None for slot in session.slots],
        active_slot=session.active_slot,
        ready=session.is_complete,
        has_background=session.background is not None,
        collage=session.collage,
        adjustments=session.adjustments
    )


@router.post("/create", response_model=SessionStatusResponse)
async def create_session(request: Optional[SessionCreateRequest] = None):
    global current_session

    collage = CollageSettings()
    if request is not None and request.collage is not None:
        collage = request.collage.apply_to(collage)

    session_id = str(uuid.uuid4())
    session = BoothSession.new(session_id, settings.photo_count, collage)

    active_sessions[session_id] = session
    current_session = session_id

    logger.info(f"Created session {session_id} with layout: {collage.layout_mode.value}")
    return _status(session)


@router.post("/capture", response_model=PhotoCaptureResponse)
async def capture_photo(
        camera_service: CameraService = Depends(get_camera_service),
        photo_service: PhotoService = Depends(get_photo_service),
        websocket_manager: WebSocketManager = Depends(get_websocket_manager)
):
    session = _get_current_session()

    image = await asyncio.wrap_future(camera_service.capture_async())
    if image is None:
        raise HTTPException(status_code=503, detail=camera_service.last_error or "Camera not available")

    photo_b64 = photo_service.encode_image(image)
    slot = session.store_in_active_slot(photo_b64)

    logger.info(f"Captured photo into slot {slot + 1} for session {session.session_id}")

    await websocket_manager.broadcast({
        "type": "photo_captured",
        "session_id": session.session_id,
        "slot": slot,
        "active_slot": session.active_slot,
        "ready": session.is_complete
    })

    return PhotoCaptureResponse(
        success=True,
        slot=slot,
        active_slot=session.active_slot,
        filled_count=session.filled_count,
        ready=session.is_complete,
        photo=photo_b64
    )


@router.post("/slots/{index}/select", response_model=SessionStatusResponse)
async def select_slot(index: int):
    session = _get_current_session()
    _check_slot(session, index)
    session.active_slot = index
    return _status(session)


@router.delete("/slots/{index}", response_model=SessionStatusResponse)
async def clear_slot(index: int):
    session = _get_current_session()
    _check_slot(session, index)
    session.slots[index] = None
    session.adjustments[index] = Adjustment()
    return _status(session)


@router.put("/slots/{index}/adjustment", response_model=SessionStatusResponse)
async def adjust_slot(index: int, adjustment: Adjustment):
    session = _get_current_session()
    _check_slot(session, index)
    session.adjustments[index] = adjustment
    return _status(session)


@router.put("/settings", response_model=SessionStatusResponse)
async def update_settings(update: CollageSettingsUpdate):
    session = _get_current_session()
    session.collage = update.apply_to(session.collage)
    return _status(session)


@router.post("/background", response_model=SessionStatusResponse)
async def upload_background(
        file: UploadFile = File(...),
        photo_service: PhotoService = Depends(get_photo_service)
):
    session = _get_current_session()
    data = await file.read()
    background_b64 = base64.b64encode(data).decode('utf-8')
    try:
        photo_service.decode_image(background_b64)
    except ValueError:
        raise HTTPException(status_code=400, detail="Background must be an image file")

    session.background = background_b64
    logger.info(f"Background {file.filename} set for session {session.session_id}")
    return _status(session)


@router.delete("/background", response_model=SessionStatusResponse)
async def clear_background():
    session = _get_current_session()
    session.background = None
    return _status(session)


@router.get("/preview")
async def preview_collage(
        width: Optional[int] = Query(None, ge=50, le=4000),
        height: Optional[int] = Query(None, ge=50, le=4000),
        photo_service: PhotoService = Depends(get_photo_service)
):
    session = _get_current_session()
    collage = await run_in_threadpool(
        photo_service.build_collage, session, photo_service.preview_canvas_size(session, width, height)
    )
    if collage is None:
        raise HTTPException(status_code=409, detail=f"Need {session.photo_count} photos")

    buffer = io.BytesIO()
    collage.save(buffer, format="PNG")
    return Response(content=buffer.getvalue(), media_type="image/png")


@router.post("/export", response_model=ExportResponse)
async def export_document(
        photo_service: PhotoService = Depends(get_photo_service),
        document_service: DocumentService = Depends(get_document_service),
        websocket_manager: WebSocketManager = Depends(get_websocket_manager)
):
    session = _get_current_session()
    collage = await run_in_threadpool(photo_service.build_collage, session, photo_service.export_canvas_size(session))
    if collage is None:
        raise HTTPException(status_code=409, detail=f"Need {session.photo_count} photos")

    result = await run_in_threadpool(document_service.export, collage, session.collage.width_fraction)
    if not result.success:
        return ExportResponse(success=False, message=result.message)

    filename = os.path.basename(result.path)
    await websocket_manager.broadcast({
        "type": "export_complete",
        "session_id": session.session_id,
        "filename": filename
    })

    return ExportResponse(
        success=True,
        message=result.message,
        filename=filename,
        download_url=f"/api/exports/{filename}"
    )


@router.get("/status", response_model=SessionStatusResponse)
async def get_session_status():
    if current_session is None or current_session not in active_sessions:
        return SessionStatusResponse(session_id=None, photo_count=0)
    return _status(active_sessions[current_session])


@router.delete("/reset")
async def reset_session():
    global current_session

    if current_session and current_session in active_sessions:
        del active_sessions[current_session]
    current_session = None
    return {"success": True}
