from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.schemas import EnrichedReading, IntensityUnit
from app.api import get_enricher
from services.enricher import ReadingEnricher


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

_UNIT_LABELS = {
    IntensityUnit.speed: "m/s",
    IntensityUnit.acceleration: "m/s²",
}

REFRESH_SECONDS = 2


def _received_at(reading: Optional[EnrichedReading]) -> Optional[str]:
    if reading is None:
        return None
    moment = datetime.fromtimestamp(reading.timestamp_ms / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds")


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    enricher: ReadingEnricher = Depends(get_enricher),
) -> HTMLResponse:
    reading = enricher.get_latest()
    unit_label = None
    if reading is not None and reading.intensity_unit is not None:
        unit_label = _UNIT_LABELS[reading.intensity_unit]
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "reading": reading,
            "received_at": _received_at(reading),
            "unit_label": unit_label,
            "refresh_seconds": REFRESH_SECONDS,
        },
    )
