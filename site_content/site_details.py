# ---- SITE SETTINGS & FOOTER APIS ----
import logging

from rest_framework import status
from rest_framework.views import APIView

from .content import ContentWriteMixin
from .permissions import AdminPasscodePermission
from .schema import normalize_social_link
from .serializers import SettingSerializer, SocialLinkSerializer
from .utilities import _parse_payload, api_error, api_response, find_index, generate_item_id

logger = logging.getLogger(__name__)


class ShowSiteSettingsAPIView(ContentWriteMixin, APIView):
    permission_classes = [AdminPasscodePermission]

    def get(self, request):
        """GET /api/content/settings/all/ -> { siteTitle, favicon }"""
        return api_response(self.get_store().read().document["settings"])


class SaveSiteSettingAPIView(ContentWriteMixin, APIView):
    permission_classes = [AdminPasscodePermission]

    def get(self, request):
        return self.section_response("settings")

    def put(self, request):
        return self.save_section("settings", _parse_payload(request))

    def post(self, request):
        """
        POST /api/content/settings/
        Accepts: { key: "siteTitle" | "favicon", value }
        Any other object is merged into the section as-is.
        """
        payload = _parse_payload(request)
        if not isinstance(payload, dict) or "key" not in payload:
            return self.save_section("settings", payload)

        serializer = SettingSerializer(data=payload)
        if not serializer.is_valid():
            return api_error("Setting key and value are required", errors=serializer.errors)
        key = serializer.validated_data["key"]
        value = serializer.validated_data["value"].strip()

        return self.save_content(
            updates={"settings": {key: value}},
            data_key="settings",
            message="Site setting updated successfully",
        )


class SocialLinksAPIView(ContentWriteMixin, APIView):
    permission_classes = [AdminPasscodePermission]

    def get(self, request):
        """GET /api/content/footer/social-links/"""
        return api_response(self.get_store().read().document["footer"]["socialLinks"])

    def post(self, request):
        """
        POST /api/content/footer/social-links/
        Accepts: { id?, platform, url, icon? }
        """
        serializer = SocialLinkSerializer(data=request.data)
        if not serializer.is_valid():
            return api_error("Platform is required", errors=serializer.errors)
        data = dict(serializer.validated_data)

        links = self.get_store().read().document["footer"]["socialLinks"]
        existing = [link["id"] for link in links]
        data["id"] = (data.get("id") or "").strip() or generate_item_id(data["platform"], existing, "link")
        if data["id"] in existing:
            return api_error("Duplicate social link", f"Social link '{data['id']}' already exists")

        link = normalize_social_link(data, len(links))
        return self.save_content(
            updates={"footer": {"socialLinks": links + [link]}},
            data_key="footer",
            message="Social link added successfully",
            status_code=status.HTTP_201_CREATED,
            item=link,
        )


class EditSocialLinkAPIView(ContentWriteMixin, APIView):
    permission_classes = [AdminPasscodePermission]

    def put(self, request, link_id):
        """PUT /api/content/footer/social-links/<id>/"""
        serializer = SocialLinkSerializer(data=request.data)
        if not serializer.is_valid():
            return api_error("Platform is required", errors=serializer.errors)

        links = self.get_store().read().document["footer"]["socialLinks"]
        index = find_index(links, link_id)
        if index < 0:
            return api_error("Social link not found", status_code=status.HTTP_404_NOT_FOUND)

        data = dict(serializer.validated_data, id=links[index]["id"])
        links[index] = normalize_social_link(data, index)
        return self.save_content(
            updates={"footer": {"socialLinks": links}},
            data_key="footer",
            message="Social link updated successfully",
            item=links[index],
        )

    def delete(self, request, link_id):
        """DELETE /api/content/footer/social-links/<id>/"""
        links = self.get_store().read().document["footer"]["socialLinks"]
        remaining = [link for link in links if link["id"] != link_id]
        if len(remaining) == len(links):
            return api_error("Social link not found", status_code=status.HTTP_404_NOT_FOUND)

        return self.save_content(
            updates={"footer": {"socialLinks": remaining}},
            data_key="footer",
            message="Social link deleted successfully",
        )
