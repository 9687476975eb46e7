"""URL routes for accounts APIs."""

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from .views import CustomerAdminViewSet, RegisterView, StoreTokenObtainPairView, UserProfileViewSet

router = DefaultRouter()
router.register(r'profile', UserProfileViewSet, basename='user-profile')
router.register(r'customers', CustomerAdminViewSet, basename='customer')

urlpatterns = [
    path('register/', RegisterView.as_view(), name='auth_register'),
    path('login/', StoreTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('', include(router.urls)),
]
