from rest_framework import serializers

from .models import Product, UploadJob


class ProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = [
            "id",
            "unique_key",
            "product_title",
            "product_description",
            "style_number",
            "sanmar_mainframe_color",
            "size",
            "color_name",
            "piece_price",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class UploadJobSerializer(serializers.ModelSerializer):
    class Meta:
        model = UploadJob
        fields = ["id", "file_name", "status", "created_at"]
        read_only_fields = fields


class UploadJobDetailSerializer(serializers.ModelSerializer):
    class Meta:
        model = UploadJob
        fields = [
            "id",
            "file_name",
            "status",
            "created_at",
            "updated_at",
            "processed_rows",
            "skipped_rows",
            "error_message",
        ]
        read_only_fields = fields
