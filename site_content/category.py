# Standard Library
import logging

# Django REST Framework
from rest_framework import status
from rest_framework.views import APIView

# Local Imports
from .content import ContentWriteMixin
from .permissions import AdminPasscodePermission
from .serializers import CategorySerializer
from .utilities import _parse_payload, api_error, api_response, find_index, generate_item_id

logger = logging.getLogger(__name__)


class ShowCategoryAPIView(ContentWriteMixin, APIView):
    permission_classes = [AdminPasscodePermission]

    def get(self, request):
        """GET /api/content/categories/all/ in display order."""
        categories = self.get_store().read().document["categories"]
        return api_response(categories)


class SaveCategoryAPIView(ContentWriteMixin, APIView):
    permission_classes = [AdminPasscodePermission]

    def get(self, request):
        return self.section_response("categories")

    def put(self, request):
        return self.save_section("categories", _parse_payload(request))

    def post(self, request):
        """
        POST /api/content/categories/
        Accepts: { id?, name, description? }. Without an id one is built from
        the name ("Hot Drinks" -> "hot-drinks"). Appended at the end.
        A JSON list replaces the whole section instead.
        """
        payload = _parse_payload(request)
        if isinstance(payload, list):
            return self.save_section("categories", payload)

        serializer = CategorySerializer(data=payload or {})
        if not serializer.is_valid():
            return api_error("Category name is required", errors=serializer.errors)
        data = serializer.validated_data

        categories = self.get_store().read().document["categories"]
        existing = [c["id"] for c in categories]
        category_id = (data.get("id") or "").strip() or generate_item_id(data["name"], existing, "category")
        if category_id in existing:
            return api_error("Duplicate category", f"Category '{category_id}' already exists")

        category = {"id": category_id, "name": data["name"], "description": data.get("description", "")}
        return self.save_content(
            updates={"categories": categories + [category]},
            data_key="categories",
            message="Category added successfully",
            status_code=status.HTTP_201_CREATED,
            item=category,
        )


class EditCategoryAPIView(ContentWriteMixin, APIView):
    permission_classes = [AdminPasscodePermission]

    def put(self, request, category_id):
        """PUT /api/content/categories/<id>/ -> replaces the category in place."""
        serializer = CategorySerializer(data=request.data)
        if not serializer.is_valid():
            return api_error("Category name is required", errors=serializer.errors)
        data = serializer.validated_data

        categories = self.get_store().read().document["categories"]
        index = find_index(categories, category_id)
        if index < 0:
            return api_error("Category not found", status_code=status.HTTP_404_NOT_FOUND)

        category = {"id": categories[index]["id"], "name": data["name"], "description": data.get("description", "")}
        categories[index] = category
        return self.save_content(
            updates={"categories": categories},
            data_key="categories",
            message="Category updated successfully",
            item=category,
        )

    def delete(self, request, category_id):
        """
        DELETE /api/content/categories/<id>/
        Products pointing at the category are left as they are.
        """
        categories = self.get_store().read().document["categories"]
        remaining = [c for c in categories if c["id"] != category_id]
        if len(remaining) == len(categories):
            return api_error("Category not found", status_code=status.HTTP_404_NOT_FOUND)

        return self.save_content(
            updates={"categories": remaining},
            data_key="categories",
            message="Category deleted successfully",
        )
