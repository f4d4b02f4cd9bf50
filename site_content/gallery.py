# ---- GALLERY APIS ----
import logging

from rest_framework import status
from rest_framework.views import APIView

from .content import ContentWriteMixin
from .permissions import AdminPasscodePermission
from .serializers import GalleryImageSerializer
from .utilities import _parse_payload, api_error, api_response

logger = logging.getLogger(__name__)


class ShowGalleryAPIView(ContentWriteMixin, APIView):
    permission_classes = [AdminPasscodePermission]

    def get(self, request):
        """GET /api/content/gallery/all/"""
        return api_response(self.get_store().read().document["gallery"])


class GalleryAPIView(ContentWriteMixin, APIView):
    """
    Gallery images are plain URL strings, so the URL itself is the id.
    """
    permission_classes = [AdminPasscodePermission]

    def get(self, request):
        return self.section_response("gallery")

    def put(self, request):
        return self.save_section("gallery", _parse_payload(request))

    def post(self, request):
        """
        POST /api/content/gallery/
        Accepts: { url } (hosted media URL), appended at the end.
        { title?, images? } is merged into the section instead.
        """
        payload = _parse_payload(request)
        if not isinstance(payload, dict) or "url" not in payload:
            return self.save_section("gallery", payload)

        serializer = GalleryImageSerializer(data=payload)
        if not serializer.is_valid():
            return api_error("Image URL is required", errors=serializer.errors)
        url = serializer.validated_data["url"]

        images = self.get_store().read().document["gallery"]["images"]
        return self.save_content(
            updates={"gallery": {"images": images + [url]}},
            data_key="gallery",
            message="Gallery image added successfully",
            status_code=status.HTTP_201_CREATED,
        )

    def delete(self, request):
        """
        DELETE /api/content/gallery/?url=<url>  (or { url } in the body)
        """
        payload = _parse_payload(request) or {}
        body_url = payload.get("url") if isinstance(payload, dict) else None
        url = (request.query_params.get("url") or body_url or "").strip()
        if not url:
            return api_error("Image URL is required")

        images = self.get_store().read().document["gallery"]["images"]
        remaining = [img for img in images if img != url]
        if len(remaining) == len(images):
            return api_error("Gallery image not found", status_code=status.HTTP_404_NOT_FOUND)

        return self.save_content(
            updates={"gallery": {"images": remaining}},
            data_key="gallery",
            message="Gallery image deleted successfully",
        )
