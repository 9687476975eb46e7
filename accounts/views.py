"""Accounts app views.

Contains:
- Registration (public)
- JWT login that also refuses locked accounts
- Profile read/update for the authenticated user
- Back-office customer management (list, edit, lock, delete)
"""

import logging

from django.db.models import Count
from rest_framework import generics, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.views import TokenObtainPairView

from core.exceptions import Conflict
from .permissions import IsAdminRole
from .serializers import CustomerAdminSerializer, LockSerializer, RegisterSerializer, UserProfileSerializer

logger = logging.getLogger(__name__)


class RegisterView(generics.CreateAPIView):
    """Public registration endpoint."""
    queryset = RegisterSerializer.Meta.model.objects.all()
    permission_classes = [AllowAny]
    serializer_class = RegisterSerializer


class StoreTokenObtainPairSerializer(TokenObtainPairSerializer):
    """JWT pair that carries the user's role and rejects locked accounts."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['role'] = user.role
        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        if getattr(self.user, 'is_locked', False):
            raise PermissionDenied('This account has been locked.')
        data['user'] = UserProfileSerializer(self.user).data
        return data


class StoreTokenObtainPairView(TokenObtainPairView):
    """Login endpoint returning access/refresh tokens plus the profile."""

    serializer_class = StoreTokenObtainPairSerializer


class UserProfileViewSet(viewsets.GenericViewSet):
    """Authenticated profile management."""
    permission_classes = [IsAuthenticated]
    serializer_class = UserProfileSerializer

    @action(detail=False, methods=['get', 'put'])
    def me(self, request):
        """Get or update the authenticated user's profile."""
        user = request.user
        if request.method == 'GET':
            serializer = self.get_serializer(user)
            return Response(serializer.data)

        serializer = self.get_serializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        user.refresh_from_db()
        return Response(self.get_serializer(user).data, status=status.HTTP_200_OK)


class CustomerAdminViewSet(viewsets.ModelViewSet):
    """Administrator management of user accounts.

    Accounts that already placed orders cannot be deleted; lock them instead.
    """

    permission_classes = [IsAuthenticated, IsAdminRole]
    serializer_class = CustomerAdminSerializer
    filterset_fields = ['role', 'is_locked']
    http_method_names = ['get', 'put', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        User = CustomerAdminSerializer.Meta.model
        return User.objects.annotate(order_count=Count('orders')).order_by('-date_joined')

    def perform_destroy(self, instance):
        if instance.pk == self.request.user.pk:
            raise ValidationError('You cannot delete your own account.')
        if instance.orders.exists():
            raise Conflict('This account has orders and cannot be deleted. Lock it instead.')
        logger.info('User %s deleted by %s', instance.username, self.request.user.username)
        instance.delete()

    @action(detail=True, methods=['patch'])
    def lock(self, request, pk=None):
        """Lock or unlock an account. Body: ``{"is_locked": true|false}``."""
        user = self.get_object()
        serializer = LockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if user.pk == request.user.pk:
            raise ValidationError({'is_locked': 'You cannot lock your own account.'})

        user.is_locked = serializer.validated_data['is_locked']
        user.save(update_fields=['is_locked'])
        logger.info('User %s %s by %s', user.username, 'locked' if user.is_locked else 'unlocked', request.user.username)
        return Response({
            'success': True,
            'message': 'Account locked.' if user.is_locked else 'Account unlocked.',
            'data': self.get_serializer(self.get_object()).data,
        })
