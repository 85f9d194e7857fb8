"""Portfolio Service - FastAPI server for the portfolio contact form."""

import os
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.shared.contact.routes import router as contact_router, ContactError


def get_allowed_origins() -> list:
    raw = os.environ.get("CORS_ALLOWED_ORIGINS", "http://localhost:3000")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


ALLOWED_ORIGINS = get_allowed_origins()

app = FastAPI(
    title="Portfolio Service",
    description="Contact form relay for the portfolio site",
    version="0.1.0"
)

# Include contact routes
app.include_router(contact_router)

# CORS configuration - must be added before exception handlers
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type"],
    expose_headers=["Retry-After"],
)


def _cors_headers(request: Request) -> dict:
    """CORS headers for error responses built outside the middleware."""
    headers = {}
    origin = request.headers.get("origin")
    if origin in ALLOWED_ORIGINS:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Access-Control-Expose-Headers"] = "Retry-After"
    return headers


def _failure(request: Request, status_code: int, message: str, extra_headers: dict = None) -> JSONResponse:
    headers = _cors_headers(request)
    if extra_headers:
        headers.update(extra_headers)
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers
    )


@app.exception_handler(ContactError)
async def contact_error_handler(request: Request, exc: ContactError):
    """Render gate failures with the contact response envelope."""
    return _failure(request, exc.status_code, exc.message, exc.headers)


# Global exception handlers keep every error in the {success, message} shape
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _failure(request, exc.status_code, message, getattr(exc, "headers", None))


@app.exception_handler(StarletteHTTPException)
async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _failure(request, exc.status_code, message, getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _failure(request, 422, "Invalid request.")


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Last resort: log and answer with a generic message, no internals."""
    logging.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return _failure(request, 500, "Unable to process contact request.")


@app.get("/")
async def root():
    return {"message": "Portfolio Service API is running", "status": "ok"}


@app.get("/health")
async def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8000")))
