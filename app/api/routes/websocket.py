from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Depends
import json
import asyncio

from app.services.camera import CameraService
from app.services.websocket import WebSocketManager
from app.api.dependencies import get_camera_service, get_websocket_manager
from app.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    camera_service: CameraService = Depends(get_camera_service),
    websocket_manager: WebSocketManager = Depends(get_websocket_manager)
):
    await websocket_manager.connect(websocket)
    try:
        while True:
            frame = await asyncio.wrap_future(camera_service.preview_async())
            if frame:
                await websocket.send_text(json.dumps({
                    "type": "preview",
                    "data": frame
                }))
            else:
                await websocket.send_text(json.dumps({
                    "type": "camera_unavailable",
                    "detail": camera_service.last_error
                }))
                await asyncio.sleep(1)
            await asyncio.sleep(1 / 15)  # ~15 FPS
    except WebSocketDisconnect:
        websocket_manager.disconnect(websocket)
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
        websocket_manager.disconnect(websocket)
