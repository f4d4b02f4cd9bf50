# Standard Library
import logging

# Django REST Framework
from rest_framework import status
from rest_framework.views import APIView

# Local Imports
from .content import ContentWriteMixin
from .permissions import AdminPasscodePermission
from .schema import category_name, display_price, normalize_product
from .serializers import ProductSerializer
from .utilities import _parse_payload, api_error, api_response, find_index, generate_item_id

logger = logging.getLogger(__name__)

UNCATEGORIZED = "uncategorized"


def _serialize_product(product, doc):
    """Stored product plus the read-side fields the menu renders."""
    return {
        **product,
        "displayPrice": display_price(product),
        "categoryName": category_name(doc, product.get("category")),
    }


def _product_from(data, product_id):
    product = {
        "id": product_id,
        "name": data["name"],
        "description": data.get("description", ""),
        "category": (data.get("category") or "").strip() or None,
        "image": data.get("image", ""),
    }
    if data.get("price") is not None:
        product["price"] = data["price"]
    if "sizes" in data:
        product["sizes"] = [dict(s) for s in data["sizes"]]
    return product


class ShowProductsAPIView(ContentWriteMixin, APIView):
    permission_classes = [AdminPasscodePermission]

    def get(self, request):
        """
        GET /api/content/products/all/[?category=<id>]
        """
        doc = self.get_store().read().document
        products = doc["products"]
        category = request.query_params.get("category")
        if category:
            products = [p for p in products if p.get("category") == category]
        return api_response([_serialize_product(p, doc) for p in products])


class SaveProductAPIView(ContentWriteMixin, APIView):
    permission_classes = [AdminPasscodePermission]

    def get(self, request):
        return self.section_response("products")

    def put(self, request):
        return self.save_section("products", _parse_payload(request))

    def post(self, request):
        """
        POST /api/content/products/
        Accepts: { id?, name, description?, category?, image?, price? | sizes? }
        `image` is whatever URL the media upload returned; it is stored as given.
        A JSON list replaces the whole section instead.
        """
        payload = _parse_payload(request)
        if isinstance(payload, list):
            return self.save_section("products", payload)

        serializer = ProductSerializer(data=payload or {})
        if not serializer.is_valid():
            return api_error("Invalid product", errors=serializer.errors)
        data = serializer.validated_data

        products = self.get_store().read().document["products"]
        existing = [p["id"] for p in products]
        product_id = (data.get("id") or "").strip() or generate_item_id(data["name"], existing, "product")
        if product_id in existing:
            return api_error("Duplicate product", f"Product '{product_id}' already exists")

        product = normalize_product(_product_from(data, product_id), len(products))
        return self.save_content(
            updates={"products": products + [product]},
            data_key="products",
            message="Product added successfully",
            status_code=status.HTTP_201_CREATED,
            item=product,
        )


class EditProductAPIView(ContentWriteMixin, APIView):
    permission_classes = [AdminPasscodePermission]

    def put(self, request, product_id):
        """PUT /api/content/products/<id>/ -> replaces the product in place."""
        serializer = ProductSerializer(data=request.data)
        if not serializer.is_valid():
            return api_error("Invalid product", errors=serializer.errors)

        products = self.get_store().read().document["products"]
        index = find_index(products, product_id)
        if index < 0:
            return api_error("Product not found", status_code=status.HTTP_404_NOT_FOUND)

        product = normalize_product(_product_from(serializer.validated_data, products[index]["id"]), index)
        products[index] = product
        return self.save_content(
            updates={"products": products},
            data_key="products",
            message="Product updated successfully",
            item=product,
        )

    def delete(self, request, product_id):
        """DELETE /api/content/products/<id>/"""
        products = self.get_store().read().document["products"]
        remaining = [p for p in products if p["id"] != product_id]
        if len(remaining) == len(products):
            return api_error("Product not found", status_code=status.HTTP_404_NOT_FOUND)

        return self.save_content(
            updates={"products": remaining},
            data_key="products",
            message="Product deleted successfully",
        )


class ShowMenuAPIView(ContentWriteMixin, APIView):
    permission_classes = [AdminPasscodePermission]

    def get(self, request):
        """
        GET /api/content/menu/
        Categories in display order, each with its products and display price.
        Products whose category no longer exists are listed under
        "uncategorized" rather than dropped.
        """
        doc = self.get_store().read().document
        known = {c["id"] for c in doc["categories"]}

        menu = []
        for cat in doc["categories"]:
            items = [_serialize_product(p, doc) for p in doc["products"] if p.get("category") == cat["id"]]
            menu.append({**cat, "products": items})

        orphans = [_serialize_product(p, doc) for p in doc["products"] if p.get("category") not in known]
        if orphans:
            menu.append({"id": UNCATEGORIZED, "name": "", "description": "", "products": orphans})

        return api_response(menu)
