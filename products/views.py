"""Products API views.

Includes CRUD for products (administrators) and read access for shoppers.
Filtering/search/ordering/pagination are provided for list endpoints.
"""

from rest_framework import viewsets, filters
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework.pagination import PageNumberPagination

from accounts.permissions import IsAdminOrReadOnly
from .models import Brand, Product, ProductCategory
from .serializers import BrandSerializer, ProductSerializer, ProductCategorySerializer


class StandardResultsSetPagination(PageNumberPagination):
    """Default pagination used by most API endpoints."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class ProductViewSet(viewsets.ModelViewSet):
    """Products CRUD.

    - Public users: can read active products only.
    - Administrators: full CRUD over the whole catalogue.
    """

    serializer_class = ProductSerializer
    pagination_class = StandardResultsSetPagination
    permission_classes = [IsAdminOrReadOnly]

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['category', 'brand', 'in_stock']
    search_fields = ['name', 'code', 'description']
    ordering_fields = ['name', 'price', 'created_at']

    def get_queryset(self):
        qs = Product.objects.select_related('category', 'brand').prefetch_related('colors')
        user = self.request.user
        if user.is_authenticated and getattr(user, 'is_admin', False):
            return qs
        return qs.filter(is_active=True)

    def perform_destroy(self, instance):
        # Soft delete: past orders keep pointing at the product.
        instance.is_active = False
        instance.save(update_fields=['is_active'])


class ProductCategoryViewSet(viewsets.ModelViewSet):
    """Product categories; public read, admin write."""
    queryset = ProductCategory.objects.order_by('category_name')
    serializer_class = ProductCategorySerializer
    permission_classes = [IsAdminOrReadOnly]


class BrandViewSet(viewsets.ModelViewSet):
    """Brands; shoppers see active brands, administrators see and manage all.

    Deleting a brand only hides it so existing products keep their link.
    """

    serializer_class = BrandSerializer
    permission_classes = [IsAdminOrReadOnly]

    def get_queryset(self):
        qs = Brand.objects.all()
        user = self.request.user
        if not (user.is_authenticated and getattr(user, 'is_admin', False)):
            return qs.filter(is_active=True)
        is_active = self.request.query_params.get('is_active')
        if is_active in ('true', 'false'):
            qs = qs.filter(is_active=is_active == 'true')
        return qs

    def perform_destroy(self, instance):
        instance.is_active = False
        instance.save(update_fields=['is_active'])

    @action(detail=False, methods=['get'], url_path=r'slug/(?P<slug>[-\w]+)')
    def by_slug(self, request, slug=None):
        brand = self.get_queryset().filter(slug=slug).first()
        if brand is None:
            raise NotFound('Brand not found.')
        return Response(self.get_serializer(brand).data)
