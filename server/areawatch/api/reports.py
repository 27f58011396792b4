"""Report API endpoints.

This is the thin FastAPI adapter. It parses HTTP requests, validates the
JSON body, and calls the processor or storage.
"""

from __future__ import annotations

import json

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from areawatch.core.validation import validate_report_submission
from areawatch.storage.file_storage import parse_timestamp

log = structlog.get_logger()

router = APIRouter(prefix="/api/v1")


async def _read_json(request: Request):
    """Return the parsed body, or None if it is not valid JSON."""
    body_bytes = await request.body()
    try:
        return json.loads(body_bytes)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


@router.post("/reports")
async def submit_report(request: Request) -> JSONResponse:
    """Submit a community report.

    The stored severity is computed from nearby recent reports; any
    severity in the body is ignored.
    """
    from areawatch.main import get_processor, get_stats

    body = await _read_json(request)
    if body is None:
        get_stats().record_rejected()
        return JSONResponse(
            content={"success": False, "error": "invalid JSON"},
            status_code=400,
        )

    submission, errors = validate_report_submission(body)
    if submission is None:
        get_stats().record_rejected()
        log.info("report_rejected", fields=[e.field for e in errors])
        return JSONResponse(
            content={
                "success": False,
                "error": "Validation failed",
                "errors": [e.to_dict() for e in errors],
            },
            status_code=400,
        )

    try:
        report = await get_processor().submit(submission)
    except OSError as exc:
        return JSONResponse(
            content={"success": False, "error": "Failed to save report", "details": str(exc)},
            status_code=500,
        )

    return JSONResponse(content={"success": True, "report": report.to_dict()}, status_code=201)


@router.get("/reports")
async def list_reports(
    limit: int = 100,
    offset: int = Query(default=0, ge=0),
    severity: list[str] | None = Query(default=None),
    type: list[str] | None = Query(default=None),
    since: str | None = None,
    barangay: str | None = None,
    city: str | None = None,
) -> JSONResponse:
    """List non-deleted reports, newest first, with optional filters."""
    from areawatch.main import get_config, get_storage

    limit = max(1, min(get_config().limits.max_reports_per_page, limit))

    reports = get_storage().read_all()
    if since:
        try:
            cutoff = parse_timestamp(since)
        except ValueError:
            return JSONResponse(
                content={"success": False, "error": "since must be an ISO timestamp"},
                status_code=400,
            )
        reports = [r for r in reports if r.timestamp >= cutoff]
    if severity:
        reports = [r for r in reports if r.severity.value in severity]
    if type:
        reports = [r for r in reports if r.type.value in type]
    if barangay:
        reports = [r for r in reports if r.barangay == barangay]
    if city:
        reports = [r for r in reports if r.city == city]

    reports.sort(key=lambda r: r.timestamp, reverse=True)
    total = len(reports)
    page = reports[offset:offset + limit]

    return JSONResponse(content={
        "reports": [r.to_dict() for r in page],
        "total": total,
        "has_more": total > offset + limit,
    })


@router.delete("/reports")
async def delete_reports(request: Request) -> JSONResponse:
    """Soft-delete reports by id.

    Body: {"ids": ["...", "..."]}
    """
    from areawatch.main import get_processor

    body = await _read_json(request)
    if not isinstance(body, dict):
        return JSONResponse(content={"success": False, "error": "invalid JSON"}, status_code=400)

    ids = body.get("ids") or []
    if not isinstance(ids, list):
        return JSONResponse(content={"success": False, "error": "ids must be a list"}, status_code=400)
    if not ids:
        return JSONResponse(content={"deleted": 0})

    deleted = get_processor().delete([str(i) for i in ids])
    return JSONResponse(content={"deleted": deleted})
