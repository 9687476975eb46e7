"""Review APIs.

- Public: visible reviews of a product with the average rating
- Shoppers: create, edit and delete their own reviews
- Administrators: list and filter everything, reply, hide/show, delete
"""

import logging

from django.db import IntegrityError, transaction
from django.db.models import Avg, Count
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import permissions, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.response import Response

from accounts.permissions import IsAdminRole
from products.models import Product
from products.views import StandardResultsSetPagination
from .models import Review
from .serializers import ReplySerializer, ReviewSerializer

logger = logging.getLogger(__name__)


class ReviewViewSet(viewsets.ModelViewSet):
    """Product reviews and their moderation."""

    serializer_class = ReviewSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = StandardResultsSetPagination
    filterset_fields = ['product', 'user', 'is_visible']

    def get_permissions(self):
        if self.action in ('for_product', 'retrieve'):
            return [permissions.AllowAny()]
        if self.action in ('list', 'reply', 'visibility'):
            return [permissions.IsAuthenticated(), IsAdminRole()]
        return super().get_permissions()

    def get_queryset(self):
        return Review.objects.select_related('user', 'product', 'replied_by')

    def get_object(self):
        review = super().get_object()
        user = self.request.user
        is_admin = user.is_authenticated and getattr(user, 'is_admin', False)
        is_owner = user.is_authenticated and review.user_id == user.id

        if self.action == 'retrieve':
            if not review.is_visible and not (is_owner or is_admin):
                raise PermissionDenied('This review is hidden.')
        elif self.action == 'destroy':
            if not (is_owner or is_admin):
                raise PermissionDenied('You can only delete your own reviews.')
        elif self.action in ('update', 'partial_update'):
            if not is_owner:
                raise PermissionDenied('You can only edit your own reviews.')
        return review

    def perform_create(self, serializer):
        try:
            with transaction.atomic():
                serializer.save(user=self.request.user)
        except IntegrityError:
            raise ValidationError({'product': 'You have already reviewed this product.'})

    @action(detail=False, methods=['get'], url_path=r'product/(?P<product_id>\d+)')
    def for_product(self, request, product_id=None):
        """Visible reviews of a product, newest first, with the average rating."""
        product = get_object_or_404(Product, pk=product_id)
        reviews = self.get_queryset().filter(product=product, is_visible=True)
        summary = reviews.aggregate(average=Avg('rating'), total=Count('id'))
        return Response({
            'success': True,
            'data': {
                'reviews': self.get_serializer(reviews, many=True).data,
                'average_rating': round(summary['average'] or 0, 1),
                'total_reviews': summary['total'],
            },
        })

    @action(detail=False, methods=['get'], url_path='my-reviews')
    def mine(self, request):
        reviews = self.get_queryset().filter(user=request.user)
        return Response({'success': True, 'data': self.get_serializer(reviews, many=True).data})

    @action(detail=True, methods=['post'])
    def reply(self, request, pk=None):
        """Admin-only: attach (or replace) the shop's answer to a review."""
        payload = ReplySerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        review = self.get_object()
        review.reply_text = payload.validated_data['text'].strip()
        review.replied_by = request.user
        review.replied_at = timezone.now()
        review.save(update_fields=['reply_text', 'replied_by', 'replied_at', 'updated_at'])
        return Response({'success': True, 'data': self.get_serializer(review).data})

    @action(detail=True, methods=['patch'])
    def visibility(self, request, pk=None):
        """Admin-only: hide a visible review or show a hidden one."""
        review = self.get_object()
        review.is_visible = not review.is_visible
        review.save(update_fields=['is_visible', 'updated_at'])
        logger.info('Review %s %s by %s', review.pk, 'shown' if review.is_visible else 'hidden', request.user.pk)
        return Response({'success': True, 'data': self.get_serializer(review).data})
