"""HTTP route definitions for the service."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.schemas import IngestResponse, LatestReadingResponse
from services.enricher import InvalidPayload, ReadingEnricher, build_default_enricher
from settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


def get_enricher() -> ReadingEnricher:
    return build_default_enricher()


async def _read_json_body(request: Request) -> object:
    limit = get_settings().max_body_bytes
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Payload too large",
        )

    body = await request.body()
    if len(body) > limit:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Payload too large",
        )
    if not body.strip():
        return None

    try:
        return json.loads(body)
    except ValueError as exc:
        logger.warning(
            "Rejecting unparseable ingest body",
            extra={"reason": str(exc), "body_bytes": len(body)},
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid payload",
        ) from exc


@router.post(
    "/api/readings",
    response_model=IngestResponse,
    summary="Ingest one telemetry sample from the device.",
)
async def ingest_reading(
    request: Request,
    enricher: ReadingEnricher = Depends(get_enricher),
) -> IngestResponse:
    payload = await _read_json_body(request)
    try:
        reading = enricher.ingest(payload)
    except InvalidPayload as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return IngestResponse(data=reading)


@router.get(
    "/api/latest",
    response_model=LatestReadingResponse,
    summary="Fetch the most recent enriched reading.",
)
async def get_latest_reading(
    enricher: ReadingEnricher = Depends(get_enricher),
) -> LatestReadingResponse:
    return LatestReadingResponse(data=enricher.get_latest())


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
