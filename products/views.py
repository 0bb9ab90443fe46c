from django_filters import rest_framework as filters
from rest_framework import pagination, permissions, viewsets

from .models import Product
from .serializers import ProductSerializer


class ProductFilterSet(filters.FilterSet):
    unique_key = filters.CharFilter(field_name="unique_key", lookup_expr="iexact")
    product_title = filters.CharFilter(field_name="product_title", lookup_expr="icontains")
    style_number = filters.CharFilter(field_name="style_number", lookup_expr="iexact")
    color_name = filters.CharFilter(field_name="color_name", lookup_expr="icontains")
    size = filters.CharFilter(field_name="size", lookup_expr="iexact")

    class Meta:
        model = Product
        fields = ["unique_key", "product_title", "style_number", "color_name", "size"]


class ProductPagination(pagination.PageNumberPagination):
    page_size = 50
    page_size_query_param = "page_size"
    max_page_size = 200


class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Product.objects.all().order_by("-created_at", "-id")
    serializer_class = ProductSerializer
    pagination_class = ProductPagination
    permission_classes = [permissions.AllowAny]
    filter_backends = [filters.DjangoFilterBackend]
    filterset_class = ProductFilterSet
