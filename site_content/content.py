# ---- SITE CONTENT APIS ----
import logging

from rest_framework import status
from rest_framework.views import APIView

from .errors import AllTiersExhausted, ContentValidationError
from .permissions import AdminPasscodePermission
from .schema import SECTIONS, is_section, normalize
from .store import build_content_store
from .utilities import _parse_payload, api_error, api_response, timestamp, write_message

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = "2.0"


class ContentWriteMixin:
    """
    Shared write path for every mutating content route: merge or replace,
    write through the store, and map store errors onto HTTP responses.
    """

    def get_store(self):
        return build_content_store()

    def save_content(self, updates=None, document=None, data_key=None, message="Content updated successfully",
                     status_code=status.HTTP_200_OK, **extra):
        store = self.get_store()
        try:
            if document is not None:
                document = normalize(document)
                report = store.write(document)
            else:
                document, report = store.update(updates or {})
        except ContentValidationError as e:
            return api_error("Invalid content", e.message, status.HTTP_400_BAD_REQUEST, field=e.field)
        except AllTiersExhausted as e:
            return api_error(
                "Content could not be saved",
                e.message,
                status.HTTP_503_SERVICE_UNAVAILABLE,
                tiersAttempted=e.tiers_attempted,
                failures=e.failures,
            )

        data = document if data_key is None else document.get(data_key)
        return api_response(
            data,
            write_message(report, message),
            status_code,
            storage=report.as_dict(),
            degraded=report.degraded,
            **extra,
        )

    def section_response(self, content_type):
        """One section of the stored document; 404 before anything is stored."""
        if not is_section(content_type):
            return api_error("Content not found", f"Unknown content type: {content_type}", status.HTTP_404_NOT_FOUND)
        try:
            section = self.get_store().read_section(content_type)
        except Exception as e:
            logger.exception("Content section read failed: %s", content_type)
            return api_error("Failed to fetch content", str(e), status.HTTP_500_INTERNAL_SERVER_ERROR)

        if section is None:
            return api_error(
                "Content not found",
                f"No content found for type: {content_type}",
                status.HTTP_404_NOT_FOUND,
            )
        return api_response(section)

    def save_section(self, content_type, payload):
        """Objects merge into the stored section; list sections are replaced."""
        if not is_section(content_type):
            return api_error("Content not found", f"Unknown content type: {content_type}", status.HTTP_404_NOT_FOUND)
        if payload is None:
            return api_error("Content data is required")
        return self.save_content(updates={content_type: payload}, data_key=content_type)


class ContentAPIView(ContentWriteMixin, APIView):
    permission_classes = [AdminPasscodePermission]

    def get(self, request):
        """
        GET /api/content/
        Whole document; falls back tier by tier down to the default document.
        """
        try:
            result = self.get_store().read()
        except Exception as e:
            logger.exception("Content read failed")
            return api_error("Failed to fetch content", str(e), status.HTTP_500_INTERNAL_SERVER_ERROR)

        return api_response(
            result.document,
            metadata={
                "loadedFrom": result.tier,
                "initialized": result.initialized,
                "version": DOCUMENT_VERSION,
                "timestamp": timestamp(),
            },
        )

    def post(self, request):
        """
        POST /api/content/
        Replaces the whole document. Missing sections fall back to defaults.
        """
        payload = _parse_payload(request)
        if not isinstance(payload, dict):
            return api_error("Invalid content data", "Request body must be a JSON object")
        return self.save_content(document=payload, message="Content saved successfully")


class ContentBulkAPIView(ContentWriteMixin, APIView):
    permission_classes = [AdminPasscodePermission]

    def post(self, request):
        """
        POST /api/content/bulk/
        { "<section>": {...}, ... } merged field by field and written once.
        """
        updates = _parse_payload(request)
        if not isinstance(updates, dict) or not updates:
            return api_error("Bulk update data is required")

        results = []
        accepted = {}
        for section, data in updates.items():
            if not is_section(section):
                results.append({"contentType": section, "success": False, "error": "Unknown content section"})
                continue
            accepted[section] = data
            results.append({"contentType": section, "success": True})

        if not accepted:
            return api_error("No known content sections in bulk update", results=results)

        ok = len(accepted)
        return self.save_content(
            updates=accepted,
            message=f"Bulk update completed: {ok}/{len(results)} sections updated",
            results=results,
        )


class ContentSectionAPIView(ContentWriteMixin, APIView):
    permission_classes = [AdminPasscodePermission]

    def get(self, request, content_type):
        """
        GET /api/content/<section>/
        404 when the section is unknown or nothing has been stored yet.
        """
        return self.section_response(content_type)

    def post(self, request, content_type):
        """
        POST /api/content/<section>/
        Objects merge into the stored section; list sections are replaced.
        """
        return self.save_section(content_type, _parse_payload(request))

    def put(self, request, content_type):
        return self.post(request, content_type)


class ContentHealthAPIView(APIView):
    permission_classes = [AdminPasscodePermission]

    def get(self, request):
        """GET /api/content/health/ -> configured/available flag per tier."""
        store = build_content_store()
        tiers = store.health()
        primary = store.primary.tier
        primary_ok = any(t["tier"] == primary and t["available"] for t in tiers)
        return api_response(
            {"tiers": tiers, "primaryTier": primary, "primaryHealthy": primary_ok, "sections": list(SECTIONS)},
            "Primary storage is healthy" if primary_ok else "Primary storage is unavailable",
        )
