from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse, PlainTextResponse
from pydantic import ValidationError

from rfq_proxy.config import settings
from rfq_proxy.customers import resolve_customer
from rfq_proxy.draft_orders import assemble_draft_order
from rfq_proxy.errors import (
    InternalError,
    ProxyAuthenticationError,
    RelayError,
    SubmissionValidationError,
    UpstreamError,
)
from rfq_proxy.schemas import CreateDraftOrderResponse, DraftOrderSubmission
from rfq_proxy.security import log_signature_diagnostics, verify_proxy_signature
from rfq_proxy.shopify_api import ShopifyAdminClient

logger = logging.getLogger(__name__)

shopify_api = ShopifyAdminClient()


@asynccontextmanager
async def _app_lifespan(_app: FastAPI) -> AsyncIterator[None]:
    logger.info(
        "RFQ relay serving %s%s for store %s (signature verification %s)",
        settings.PROXY_MOUNT_PREFIX,
        "/create-draft-order",
        settings.SHOPIFY_STORE_DOMAIN,
        "DISABLED" if settings.PROXY_SKIP_SIGNATURE_VERIFICATION else "enabled",
    )
    yield
    logger.info("RFQ relay shutting down")


async def _read_submission(request: Request) -> DraftOrderSubmission:
    try:
        payload = await request.json()
    except ValueError as exc:
        raise SubmissionValidationError("Invalid JSON payload") from exc
    if not isinstance(payload, dict):
        raise SubmissionValidationError("Request body must be a JSON object")

    line_items = payload.get("line_items")
    if not isinstance(line_items, list) or not line_items:
        raise SubmissionValidationError("No line items")

    try:
        return DraftOrderSubmission.model_validate(payload)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
        )
        raise SubmissionValidationError(f"Invalid submission: {errors}") from exc


def _verify_request(request: Request) -> None:
    if settings.PROXY_SKIP_SIGNATURE_VERIFICATION:
        logger.warning("App Proxy signature verification is bypassed by configuration")
        return

    raw_query = request.scope.get("query_string", b"").decode("utf-8", "surrogateescape")
    verified = verify_proxy_signature(
        request.url.path,
        raw_query,
        settings.SHOPIFY_API_SECRET,
        mount_prefix=settings.PROXY_MOUNT_PREFIX,
        fallback_path_prefix=settings.fallback_storefront_path,
        diagnostics=log_signature_diagnostics if settings.PROXY_SIGNATURE_DEBUG else None,
    )
    if not verified:
        raise ProxyAuthenticationError("Invalid HMAC")


async def create_draft_order(request: Request) -> CreateDraftOrderResponse:
    submission = await _read_submission(request)
    _verify_request(request)

    try:
        customer_id = await resolve_customer(shopify_api, submission.customer)
        payload = assemble_draft_order(submission, customer_id=customer_id)
        draft_order = await shopify_api.create_draft_order(payload)
    except RelayError:
        raise
    except Exception as exc:
        raise InternalError(str(exc) or exc.__class__.__name__) from exc

    draft_order_id = draft_order.get("id")
    if not draft_order_id:
        raise UpstreamError("Draft order creation response is missing draft_order.id")

    logger.info("Created draft order %s for customer %s", draft_order_id, customer_id)
    return CreateDraftOrderResponse(
        reference=draft_order_id,
        admin_url=settings.draft_order_admin_url(draft_order_id),
        invoice_url=draft_order.get("invoice_url") or None,
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="RFQ App Proxy Relay",
        default_response_class=ORJSONResponse,
        lifespan=_app_lifespan,
    )

    allow_origins = sorted(set(settings.CORS_ALLOWED_ORIGINS))
    if allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allow_origins,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )

    @app.exception_handler(RelayError)
    async def relay_error_handler(_request: Request, exc: RelayError) -> ORJSONResponse:
        if isinstance(exc, UpstreamError):
            logger.error("Shopify upstream failure (status=%s): %s", exc.upstream_status, exc)
        elif isinstance(exc, InternalError):
            logger.error("RFQ submission failed: %s", exc, exc_info=exc.__cause__ or exc)
        return ORJSONResponse(status_code=exc.status_code, content={"error": str(exc)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(_request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception("Unhandled server exception", exc_info=exc)
        return ORJSONResponse(status_code=500, content={"error": str(exc) or "Internal server error"})

    @app.get("/", response_class=PlainTextResponse)
    def root() -> str:
        return "RFQ app running"

    @app.get("/healthz", response_class=PlainTextResponse)
    def healthz() -> str:
        return "ok"

    app.add_api_route(
        f"{settings.PROXY_MOUNT_PREFIX}/create-draft-order",
        create_draft_order,
        methods=["POST"],
        response_model=CreateDraftOrderResponse,
        response_model_exclude_none=True,
    )

    return app


app = create_app()
