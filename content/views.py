"""News and banner APIs: public reads, administrator writes."""

from django.db.models import F
from rest_framework import viewsets
from rest_framework.response import Response

from accounts.permissions import IsAdminOrReadOnly
from products.views import StandardResultsSetPagination
from .models import Banner, News
from .serializers import BannerSerializer, NewsSerializer


def _is_admin(user):
    return user.is_authenticated and getattr(user, 'is_admin', False)


class NewsViewSet(viewsets.ModelViewSet):
    """News articles, newest first.

    Shoppers only see published articles; reading one counts a view.
    """

    serializer_class = NewsSerializer
    permission_classes = [IsAdminOrReadOnly]
    pagination_class = StandardResultsSetPagination
    filterset_fields = ['is_active', 'is_featured']

    def get_queryset(self):
        qs = News.objects.all()
        if not _is_admin(self.request.user):
            qs = qs.filter(is_active=True)
        return qs

    def retrieve(self, request, *args, **kwargs):
        article = self.get_object()
        News.objects.filter(pk=article.pk).update(views=F('views') + 1)
        article.refresh_from_db(fields=['views'])
        return Response(self.get_serializer(article).data)


class BannerViewSet(viewsets.ModelViewSet):
    """Home-page banners in display order."""

    serializer_class = BannerSerializer
    permission_classes = [IsAdminOrReadOnly]
    filterset_fields = ['is_active']

    def get_queryset(self):
        qs = Banner.objects.all()
        if not _is_admin(self.request.user):
            qs = qs.filter(is_active=True)
        return qs
