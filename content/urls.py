from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import BannerViewSet, NewsViewSet

router = DefaultRouter()
router.register(r'news', NewsViewSet, basename='news')
router.register(r'banners', BannerViewSet, basename='banner')

urlpatterns = [
    path('', include(router.urls)),
]
