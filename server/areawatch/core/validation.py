"""Report submission validation.

Checks a raw JSON body from the report form and turns it into a
ReportSubmission. Field names follow the web client (camelCase).
"""

from __future__ import annotations

from dataclasses import dataclass

from areawatch.core.models import AlertType, ReportSubmission, Severity

# Philippines bounding box for submitted coordinates.
PH_BOUNDS = {
    "north": 21.3,
    "south": 4.5,
    "east": 127.0,
    "west": 116.0,
}

MAX_NAME_LENGTH = 200
MAX_LOCATION_LENGTH = 500
MAX_DESCRIPTION_LENGTH = 2000
MAX_AREA_NAME_LENGTH = 200

_AREA_FIELDS = ("barangay", "city", "province", "region")


@dataclass(frozen=True)
class ValidationError:
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


def _required_text(body: dict, key: str, label: str, max_len: int,
                   errors: list[ValidationError]) -> None:
    value = body.get(key)
    if not isinstance(value, str) or not value.strip():
        errors.append(ValidationError(key, f"{label} is required"))
    elif len(value) > max_len:
        errors.append(ValidationError(key, f"{label} must be less than {max_len} characters"))


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_coordinates(value, errors: list[ValidationError]) -> None:
    if not isinstance(value, list) or len(value) != 2:
        errors.append(ValidationError("coordinates", "Coordinates must be an array of [latitude, longitude]"))
        return

    lat, lng = value
    if not _is_number(lat) or not _is_number(lng):
        errors.append(ValidationError("coordinates", "Coordinates must be numbers"))
    elif not (PH_BOUNDS["south"] <= lat <= PH_BOUNDS["north"]
              and PH_BOUNDS["west"] <= lng <= PH_BOUNDS["east"]):
        errors.append(ValidationError(
            "coordinates",
            f"Coordinates must be within Philippines bounds "
            f"({PH_BOUNDS['south']}-{PH_BOUNDS['north']}N, "
            f"{PH_BOUNDS['west']}-{PH_BOUNDS['east']}E)",
        ))


def _optional_text(value) -> str | None:
    return value.strip() if value else None


def validate_report_submission(body) -> tuple[ReportSubmission | None, list[ValidationError]]:
    """Validate a submission body. Returns (submission, []) or (None, errors).

    A ``severity`` field is accepted for compatibility with older clients but
    is discarded: stored severity is always derived from nearby reports.
    """
    if not isinstance(body, dict):
        return None, [ValidationError("body", "Request body must be an object")]

    errors: list[ValidationError] = []
    _required_text(body, "reporterName", "Reporter name", MAX_NAME_LENGTH, errors)
    _required_text(body, "location", "Location", MAX_LOCATION_LENGTH, errors)
    _required_text(body, "description", "Description", MAX_DESCRIPTION_LENGTH, errors)

    valid_types = [t.value for t in AlertType]
    if "type" in body and body["type"] not in valid_types:
        errors.append(ValidationError("type", f"Type must be one of: {', '.join(valid_types)}"))

    valid_severities = [s.value for s in Severity]
    if "severity" in body and body["severity"] not in valid_severities:
        errors.append(ValidationError("severity", f"Severity must be one of: {', '.join(valid_severities)}"))

    if body.get("coordinates") is not None:
        _check_coordinates(body["coordinates"], errors)

    for key in _AREA_FIELDS:
        value = body.get(key)
        if value is not None and (not isinstance(value, str) or len(value) > MAX_AREA_NAME_LENGTH):
            errors.append(ValidationError(
                key, f"{key.capitalize()} must be a string less than {MAX_AREA_NAME_LENGTH} characters",
            ))

    if "needsRescue" in body and not isinstance(body["needsRescue"], bool):
        errors.append(ValidationError("needsRescue", "Needs rescue must be a boolean"))

    if errors:
        return None, errors

    coords = body.get("coordinates")
    return ReportSubmission(
        reporter_name=body["reporterName"].strip(),
        location=body["location"].strip(),
        description=body["description"].strip(),
        type=AlertType(body.get("type", AlertType.OTHER.value)),
        coordinates=(float(coords[0]), float(coords[1])) if coords is not None else None,
        barangay=_optional_text(body.get("barangay")),
        city=_optional_text(body.get("city")),
        province=_optional_text(body.get("province")),
        region=_optional_text(body.get("region")),
        needs_rescue=bool(body.get("needsRescue", False)),
    ), []
