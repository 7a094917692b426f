"""FastAPI application entrypoint for the ERC protest pipeline."""
import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

# Load environment variables from .env file
load_dotenv()

from .presentation.dtos.errors import create_internal_error_response, create_validation_error_response
from .presentation.routers.protest_router import router as protest_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
# Reduce third-party logging to WARNING to reduce noise
for noisy_logger in ("botocore", "urllib3", "httpx", "openai"):
    logging.getLogger(noisy_logger).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

app = FastAPI(title="erc-protest-pipeline")

app.include_router(protest_router)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError):
    """Handle request validation errors."""
    logger.error(f"Validation error on {request.url.path}: {exc.errors()}")
    return create_validation_error_response(exc)


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(f"Unexpected error: {exc}")
    return create_internal_error_response()
