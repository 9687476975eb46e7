"""Cart APIs for authenticated shoppers."""

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework.exceptions import ValidationError
from django.db import transaction
from .models import ShoppingCart, ShoppingCartItem
from .serializers import ShoppingCartSerializer, ShoppingCartItemSerializer


def get_cart(user):
    cart, _ = ShoppingCart.objects.get_or_create(user=user)
    return cart


class CartViewSet(viewsets.GenericViewSet):
    """Cart API: a single cart per user, created on first access."""

    serializer_class = ShoppingCartSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return ShoppingCart.objects.filter(user=self.request.user)

    def list(self, request, *args, **kwargs):
        """Return the user's cart (create if missing)."""
        cart = get_cart(request.user)
        serializer = self.get_serializer(cart)
        return Response(serializer.data)

    @action(detail=False, methods=['post'])
    def clear(self, request):
        """Remove every line from the cart."""
        cart = get_cart(request.user)
        cart.items.all().delete()
        return Response(self.get_serializer(cart).data)


class CartItemViewSet(viewsets.ModelViewSet):
    """Cart item API for adding/updating/removing items from the cart."""

    serializer_class = ShoppingCartItemSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return (
            ShoppingCartItem.objects.filter(cart__user=self.request.user)
            .select_related('product')
            .prefetch_related('product__colors')
        )

    def create(self, request, *args, **kwargs):
        """Add an item to the cart, merging quantity if the line already exists."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cart = get_cart(request.user)
        product = serializer.validated_data['product']
        color = serializer.validated_data.get('selected_color') or ''
        incoming_qty = int(serializer.validated_data.get('qty') or 1)

        with transaction.atomic():
            cart_item = (
                ShoppingCartItem.objects.select_for_update()
                .filter(cart=cart, product=product, selected_color=color)
                .first()
            )
            if cart_item is None:
                cart_item = ShoppingCartItem(cart=cart, product=product, selected_color=color, qty=incoming_qty)
            else:
                cart_item.qty = int(cart_item.qty or 0) + incoming_qty

            # Re-run stock validation against the final quantity.
            final_serializer = self.get_serializer(cart_item, data={'quantity': cart_item.qty}, partial=True)
            final_serializer.is_valid(raise_exception=True)
            final_serializer.save()

        return Response(self.get_serializer(cart_item).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        """Update quantity with stock validation."""
        if isinstance(request.data, dict) and 'product' in request.data:
            raise ValidationError({'product': 'Changing product is not allowed.'})
        return super().partial_update(request, *args, **kwargs)

    def update(self, request, *args, **kwargs):
        if isinstance(request.data, dict) and 'product' in request.data and not kwargs.get('partial'):
            raise ValidationError({'product': 'Changing product is not allowed.'})
        kwargs['partial'] = True
        return super().update(request, *args, **kwargs)
