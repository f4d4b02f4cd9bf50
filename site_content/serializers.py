from rest_framework import serializers


class CategorySerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_blank=True, max_length=100)
    name = serializers.CharField(max_length=200, trim_whitespace=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")


class ProductSizeSerializer(serializers.Serializer):
    size = serializers.CharField(allow_blank=True, max_length=50)
    price = serializers.CharField(allow_blank=True, max_length=20)


class ProductSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_blank=True, max_length=100)
    name = serializers.CharField(max_length=200, trim_whitespace=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    category = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    image = serializers.CharField(required=False, allow_blank=True, default="")
    price = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=20)
    sizes = ProductSizeSerializer(many=True, required=False)

    def validate(self, attrs):
        sizes = [s for s in attrs.get("sizes") or [] if (s.get("price") or "").strip()]
        if not (attrs.get("price") or "").strip() and not sizes:
            raise serializers.ValidationError("A product needs a price or at least one priced size")
        return attrs


class GalleryImageSerializer(serializers.Serializer):
    url = serializers.CharField(max_length=2048, trim_whitespace=True)


class SocialLinkSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_blank=True, max_length=100)
    platform = serializers.CharField(max_length=50)
    url = serializers.CharField(max_length=2048, allow_blank=True, default="")
    icon = serializers.CharField(required=False, allow_blank=True, max_length=50)


class SettingSerializer(serializers.Serializer):
    key = serializers.ChoiceField(choices=["siteTitle", "favicon"])
    value = serializers.CharField(allow_blank=True)
