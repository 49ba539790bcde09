import asyncio
import csv
import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from wabridge.config import Settings, settings
from wabridge.context import BridgeContext, build_context
from wabridge.logging_utils import setup_logging, RequestLoggingMiddleware, log_send_data
from wabridge.metrics import record_send_outcome, get_metrics, get_metrics_content_type
from wabridge.models import OUTBOUND_SENDER, LogRecord, MessageKind
from wabridge.session import SessionBootstrap
from wabridge.utils import render_qr_png
from wabridge.schemas import (
    ErrorResponse,
    HealthResponse,
    LogContentsResponse,
    QRCodeResponse,
    SendRequest,
    SendResponse,
)


# Setup structured JSON logging
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

router = APIRouter()


def get_bridge(request: Request) -> BridgeContext:
    """Dependency returning the bridge context built at startup."""
    return request.app.state.bridge


def build_whatsapp_context(app_settings: Settings) -> BridgeContext:
    """Create the bridge context around a live WhatsApp client."""
    from wabridge.whatsapp import WhatsAppClient

    return build_context(app_settings, WhatsAppClient(app_settings.SESSION_DB_PATH))


# =============================================================================
# Health Check Routes
# =============================================================================

@router.get("/health/live", response_model=HealthResponse)
async def health_live() -> HealthResponse:
    """
    Liveness check: always returns 200 once the app is running.
    """
    return HealthResponse(status="ok")


@router.get("/health/ready", response_model=HealthResponse)
async def health_ready(response: Response, bridge: BridgeContext = Depends(get_bridge)) -> HealthResponse:
    """
    Readiness check: returns 200 only once the chat client is connected.

    Otherwise returns 503 (Service Unavailable).
    """
    if not bridge.client.is_connected():
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(
            status="not_ready",
            reason="WhatsApp client not connected"
        )

    return HealthResponse(status="ready")


# =============================================================================
# Send Route
# =============================================================================

@router.post(
    "/send",
    response_model=SendResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid fields"},
        500: {"model": ErrorResponse, "description": "Send failed or timed out"},
    }
)
async def send_message(
    request: Request,
    bridge: BridgeContext = Depends(get_bridge)
) -> SendResponse:
    """
    Send a text message and record it in the log.

    - Both jid (or target) and text must be non-empty strings
    - The send is bounded by SEND_TIMEOUT_SECONDS; no retry
    - A timed-out send is not cancelled: it may still be delivered later,
      with a 500 already returned and no "sent" row written
    - On success a "sent" row is appended to the log
    """
    raw_body = await request.body()

    try:
        body = json.loads(raw_body)
        send_request = SendRequest.model_validate(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error(f"Invalid JSON: {e}")
        record_send_outcome("validation_error")
        log_send_data(request=request, result="validation_error")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid JSON: {str(e)}"
        )
    except ValidationError as e:
        logger.error(f"Validation error: {e}")
        record_send_outcome("validation_error")
        log_send_data(request=request, result="validation_error")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    logger.info(f"Received request to send message to {send_request.jid}")
    timeout = bridge.settings.SEND_TIMEOUT_SECONDS

    try:
        await asyncio.wait_for(
            run_in_threadpool(bridge.client.send_text, send_request.jid, send_request.text),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.error(f"Send to {send_request.jid} timed out after {timeout}s")
        record_send_outcome("timeout")
        log_send_data(request=request, target=send_request.jid, result="timeout")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Send timed out after {timeout}s"
        )
    except Exception as e:
        logger.error(f"Failed to send message: {e}")
        record_send_outcome("error")
        log_send_data(request=request, target=send_request.jid, result="error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    record = LogRecord.create(OUTBOUND_SENDER, MessageKind.SENT, send_request.text, datetime.now(timezone.utc))
    try:
        bridge.log.append(record)
    except OSError as e:
        logger.error(f"Message sent but not logged: {e}")

    logger.info("Message sent successfully")
    record_send_outcome("sent")
    log_send_data(request=request, target=send_request.jid, result="sent")
    return SendResponse(status="Message sent")


# =============================================================================
# Login Code Routes
# =============================================================================

@router.get(
    "/qr/text",
    response_model=QRCodeResponse,
    responses={500: {"model": ErrorResponse, "description": "No login code available"}},
)
async def qr_text(bridge: BridgeContext = Depends(get_bridge)) -> QRCodeResponse:
    """Return the current login code as text."""
    try:
        code = bridge.codes.load()
    except OSError as e:
        logger.error(f"Failed to read QR code file: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate QR code"
        )

    return QRCodeResponse(qr_code=code)


@router.get(
    "/qr/photo",
    response_class=Response,
    responses={
        200: {"content": {"image/png": {}}, "description": "Login code as a PNG"},
        500: {"model": ErrorResponse, "description": "No login code available"},
    },
)
async def qr_photo(bridge: BridgeContext = Depends(get_bridge)) -> Response:
    """Return the current login code rendered as a square PNG."""
    try:
        code = bridge.codes.load()
    except OSError as e:
        logger.error(f"Failed to read QR code file: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate QR code"
        )

    try:
        png = render_qr_png(code, bridge.settings.QR_IMAGE_SIZE)
    except Exception as e:
        logger.error(f"Failed to encode QR code image: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate QR code"
        )

    return Response(content=png, media_type="image/png")


# =============================================================================
# Log Route
# =============================================================================

@router.get(
    "/csv",
    response_model=LogContentsResponse,
    responses={500: {"model": ErrorResponse, "description": "Log unreadable"}},
)
async def csv_contents(bridge: BridgeContext = Depends(get_bridge)) -> LogContentsResponse:
    """
    Return every row of the message log, header included.
    No pagination, no filtering.
    """
    try:
        rows = bridge.log.read_all()
    except OSError as e:
        logger.error(f"Failed to open CSV file: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to open CSV file"
        )
    except csv.Error as e:
        logger.error(f"Failed to read CSV file: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read CSV file"
        )

    return LogContentsResponse(data=rows)


# =============================================================================
# Metrics Route
# =============================================================================

@router.get("/metrics")
async def metrics() -> Response:
    """
    Expose Prometheus-style metrics.

    Includes:
    - http_requests_total: Total HTTP requests by method, path, status
    - request_latency_seconds: Request latency histogram
    - send_requests_total: Outbound send outcomes by result
    - inbound_messages_total: Inbound messages by kind
    """
    return Response(
        content=get_metrics(),
        media_type=get_metrics_content_type()
    )


# =============================================================================
# Application
# =============================================================================

def create_app(context: Optional[BridgeContext] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        context: Prebuilt bridge context. When omitted, startup creates a
            WhatsApp client from settings and runs the session bootstrap.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        - Startup: build the bridge context and bring the session up
        - Shutdown: nothing to release, the client thread is a daemon
        """
        if context is None:
            bridge = build_whatsapp_context(settings)
            bootstrap = SessionBootstrap(bridge)
            # Connection failures abort startup
            await run_in_threadpool(bootstrap.start)
            app.state.bootstrap = bootstrap
        else:
            bridge = context
        app.state.bridge = bridge
        yield

    application = FastAPI(
        title="WhatsApp Bridge API",
        description="HTTP bridge for sending and logging WhatsApp messages",
        version="1.0.0",
        lifespan=lifespan,
    )
    application.add_middleware(RequestLoggingMiddleware)
    application.include_router(router)
    return application


app = create_app()


def run() -> None:
    """Run the bridge with uvicorn on HOST:PORT."""
    import uvicorn

    logger.info(f"Starting server on {settings.HOST}:{settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)
