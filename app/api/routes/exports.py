from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import FileResponse
import os

from app.services.document import DocumentService
from app.api.dependencies import get_document_service

router = APIRouter(prefix="/exports", tags=["exports"])

@router.get("/{filename}")
async def download_document(filename: str, document_service: DocumentService = Depends(get_document_service)):
    if os.path.basename(filename) != filename:
        raise HTTPException(status_code=400, detail="Invalid filename")

    filepath = os.path.join(document_service.exports_dir, filename)
    if not os.path.exists(filepath):
        raise HTTPException(status_code=404, detail="Document not found")

    return FileResponse(filepath, media_type="application/pdf", filename=filename)

@router.get("/")
async def list_documents(document_service: DocumentService = Depends(get_document_service)):
    return {"documents": document_service.list_documents()}
