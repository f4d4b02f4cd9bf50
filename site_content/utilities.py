# Standard Library
import json
import logging
import uuid

# Django
from django.utils import timezone
from django.utils.text import slugify

# Django REST Framework
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def _now():
    return timezone.now()


def timestamp():
    return _now().isoformat()


def _parse_payload(request):
    """
    JSON object or list from the request; form posts come back as a plain
    dict. None when the body holds anything else.
    """
    data = request.data
    if hasattr(data, "dict"):
        return data.dict()
    if isinstance(data, (dict, list)):
        return data
    if isinstance(data, str):
        try:
            return json.loads(data or "{}")
        except json.JSONDecodeError:
            return None
    return None


def api_response(data=None, message=None, status_code=status.HTTP_200_OK, **extra):
    body = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    body.update(extra)
    body["timestamp"] = timestamp()
    return Response(body, status=status_code)


def api_error(error, message=None, status_code=status.HTTP_400_BAD_REQUEST, **extra):
    body = {"success": False, "error": error}
    if message:
        body["message"] = message
    body.update(extra)
    body["timestamp"] = timestamp()
    return Response(body, status=status_code)


def envelope_exception_handler(exc, context):
    """
    DRF's own errors (permission denied, parse errors, bad methods) in the
    same {success, error, message, timestamp} envelope as the views.
    """
    response = exception_handler(exc, context)
    if response is None:
        return None

    data = response.data
    body = {"success": False, "error": response.status_text or "Request failed"}
    if isinstance(data, dict) and set(data) == {"detail"}:
        body["message"] = str(data["detail"])
    else:
        body["errors"] = data
    body["timestamp"] = timestamp()
    response.data = body
    return response


def write_message(report, saved_text="Content updated successfully"):
    """Tell the editor where the data actually landed."""
    if report.degraded:
        where = "local cache" if report.stored_in == ["local"] else ", ".join(report.stored_in)
        return f"Content saved to {where} only (primary storage unavailable)"
    return f"{saved_text} ({', '.join(report.stored_in)})"


def generate_item_id(name, existing_ids, fallback="item"):
    """
    Slug id from a display name, suffixed until it is unique among
    ``existing_ids``: "Hot Drinks" -> "hot-drinks", "hot-drinks-2", ...
    """
    base = slugify(name or "") or f"{fallback}-{uuid.uuid4().hex[:8]}"
    taken = set(existing_ids)
    candidate = base
    counter = 2
    while candidate in taken:
        candidate = f"{base}-{counter}"
        counter += 1
    return candidate


def find_index(items, item_id):
    """Position of the record with ``item_id`` in ``items``, or -1."""
    for i, item in enumerate(items):
        if str(item.get("id")) == str(item_id):
            return i
    return -1
