from fastapi import APIRouter, HTTPException, Depends
import asyncio

from app.services.camera import CameraService
from app.api.dependencies import get_camera_service

router = APIRouter(prefix="/camera", tags=["camera"])

@router.get("/devices")
async def list_devices(camera_service: CameraService = Depends(get_camera_service)):
    devices = await asyncio.wrap_future(camera_service.list_devices_async())
    return {"devices": devices, "current": camera_service.device_index}

@router.post("/devices/{index}")
async def switch_device(index: int, camera_service: CameraService = Depends(get_camera_service)):
    if index < 0:
        raise HTTPException(status_code=400, detail="Invalid device index")

    switched = await asyncio.wrap_future(camera_service.switch_device_async(index))
    if not switched:
        raise HTTPException(status_code=503, detail=camera_service.last_error or "Camera not available")
    return {"success": True, "current": index}
