from fastapi import FastAPI, File, UploadFile, status
import logging
from datetime import datetime
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings
from models import ServiceType
from voucher_process import VoucherProcessor

settings = get_settings()

# Create logs directory if it doesn't exist
settings.log_dir.mkdir(parents=True, exist_ok=True)

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Add file handler to write logs to file
log_file_path = settings.log_dir / f"app_{datetime.now().strftime('%Y%m%d')}.log"
file_handler = logging.FileHandler(log_file_path)
file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
logging.getLogger().addHandler(file_handler)


# Initialize FastAPI app with metadata
app = FastAPI(
    title="Wintour Voucher Generator API",
    description="API for converting travel-service exports into Wintour XML vouchers",
    version="2.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_processor() -> VoucherProcessor:
    return VoucherProcessor(settings)


# API Endpoints
@app.get("/health", tags=["Health"])
async def health():
    return {"status": "ok"}


@app.post(
    "/api/upload/{service_type}",
    tags=["Voucher Generation"]
)
async def upload_services(service_type: ServiceType, file: UploadFile = File(...)):
    """
    Convert an uploaded export into one Wintour XML document per row.

    The file extension selects the reader (.xlsx/.xls spreadsheet or .csv).
    Rows with a blank handle are ignored; rows with invalid required dates
    are reported in ``errors`` and do not stop the batch.

    Returns:
        dict: JSON response with:
            - generatedFiles: filenames written, in source row order
            - errors: "Linha <n> (Handle: <id>): <message>" entries, in source row order
    """
    logger.info(f"Received {service_type.value} upload: {file.filename}")
    content = await file.read()

    result = get_processor().process_upload(content, file.filename or "", service_type)

    # Single exit point
    if result.is_failure():
        return JSONResponse(status_code=result.status_code.value, content={"error": result.error})
    return JSONResponse(status_code=status.HTTP_200_OK, content=result.data.to_response())


# Run the application if executed directly
if __name__ == "__main__":
    import uvicorn
    logger.info("Starting Wintour Voucher Generator API in development mode.")
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
