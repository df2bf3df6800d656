from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods, require_POST

from helpers.errors import IngestionError, StorageUnavailable, UnsupportedFormatError
from helpers.ingestion import parse_upload
from helpers.records import project_records
from helpers.unit_query import FilterQuery, UnitColumns, query_units
from helpers.unit_store import get_unit_store

logger = logging.getLogger(__name__)


def _json(payload: Dict[str, Any], status: int = 200) -> JsonResponse:
    return JsonResponse(payload, status=status, encoder=DjangoJSONEncoder)


def _unit_columns() -> UnitColumns:
    return UnitColumns.from_overrides(getattr(settings, "UNIT_COLUMNS", None))


@csrf_exempt
@require_POST
def preview_import(request):
    upload = request.FILES.get("file")
    if upload is None:
        return _json({"detail": "Upload a CSV or Excel file in the 'file' field."}, status=400)

    try:
        result = parse_upload(upload.name, upload.read())
    except UnsupportedFormatError as exc:
        return _json({"detail": str(exc), "filename": exc.filename, "extension": exc.extension}, status=400)
    except IngestionError as exc:
        logger.warning("Import preview failed for %s: %s", upload.name, exc)
        return _json({"detail": str(exc), "filename": exc.filename}, status=400)

    return _json(result.to_dict())


def _list_properties(request) -> JsonResponse:
    query = FilterQuery.from_params(request.GET)
    response = query_units(get_unit_store(), query, _unit_columns())
    return _json(response.to_dict())


def _import_properties(request) -> JsonResponse:
    try:
        payload = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return _json({"success": False, "message": "Invalid JSON body."}, status=400)

    units = payload.get("units") if isinstance(payload, dict) else None
    if not isinstance(units, list) or not all(isinstance(unit, dict) for unit in units):
        return _json({"success": False, "message": "Invalid data format"}, status=400)

    selected_fields: List[str] | None = payload.get("fields")
    if selected_fields is not None and (
        not isinstance(selected_fields, list) or not all(isinstance(name, str) for name in selected_fields)
    ):
        return _json({"success": False, "message": "'fields' must be a list of column names."}, status=400)
    if selected_fields:
        units = project_records(units, selected_fields)

    try:
        stored = get_unit_store().append(units)
    except StorageUnavailable as exc:
        logger.error("Saving imported units failed: %s", exc)
        return _json({"success": False, "message": str(exc)}, status=500)

    return _json(
        {
            "success": True,
            "count": len(stored),
            "message": f"Successfully imported {len(stored)} units",
        }
    )


@csrf_exempt
@require_http_methods(["GET", "POST"])
def properties(request):
    if request.method == "POST":
        return _import_properties(request)
    return _list_properties(request)
