import uvicorn
from app.main import app
from app.config import settings
from app.logging import get_logger

logger = get_logger("run")

if __name__ == "__main__":
    logger.info("Starting Photo Booth Strip Builder")
    logger.info(f"Open the booth at: http://{settings.host}:{settings.port}")
    logger.info(f"Exported PDFs are written to: {settings.exports_dir}")
    logger.info(f"Snap {settings.photo_count} photos -> build the strip -> export an A4 PDF")

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
