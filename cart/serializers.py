"""DRF serializers for cart APIs."""

from rest_framework import serializers
from .models import ShoppingCart, ShoppingCartItem


def available_stock(product, color_name=''):
    """Stock available for a product, per colour when the product tracks colours."""
    colors = list(product.colors.all())
    if colors:
        for c in colors:
            if c.name == color_name:
                return int(c.stock or 0)
        return None
    return int(product.stock or 0)


class ShoppingCartItemSerializer(serializers.ModelSerializer):
    """Serializer for cart line items.

    Normalizes field names for the frontend (e.g., ``qty`` -> ``quantity``).
    """

    product_name = serializers.ReadOnlyField(source='product.name')
    price = serializers.ReadOnlyField(source='product.price')
    old_price = serializers.ReadOnlyField(source='product.old_price')
    image = serializers.ReadOnlyField(source='product.image')
    quantity = serializers.IntegerField(source='qty', min_value=1)
    stock = serializers.SerializerMethodField()
    subtotal = serializers.SerializerMethodField()

    class Meta:
        model = ShoppingCartItem
        fields = [
            'id',
            'product',
            'product_name',
            'image',
            'price',
            'old_price',
            'selected_color',
            'stock',
            'quantity',
            'subtotal',
        ]

    def validate(self, attrs):
        """Validate quantity against stock and product visibility."""
        instance = getattr(self, 'instance', None)
        product = attrs.get('product') or getattr(instance, 'product', None)
        color = attrs.get('selected_color', getattr(instance, 'selected_color', '')) or ''
        desired_qty = attrs.get('qty', getattr(instance, 'qty', None))

        if product is None:
            return attrs

        # A line is keyed by (product, colour); switching colour means removing and re-adding it.
        if instance is not None and instance.pk and 'selected_color' in attrs and color != (instance.selected_color or ''):
            raise serializers.ValidationError({'selected_color': 'Changing the colour of a cart line is not allowed.'})

        if not product.is_active or not product.in_stock:
            raise serializers.ValidationError({'product': 'This product is not available.'})

        stock = available_stock(product, color)
        if stock is None:
            raise serializers.ValidationError({'selected_color': f'Colour "{color}" is not available for this product.'})

        if desired_qty is not None and int(desired_qty) > stock:
            raise serializers.ValidationError({'quantity': f'Only {stock} item(s) available in stock.'})

        return attrs

    def get_stock(self, obj):
        return available_stock(obj.product, obj.selected_color) or 0

    def get_subtotal(self, obj):
        return obj.subtotal


class ShoppingCartSerializer(serializers.ModelSerializer):
    """Serializer for the shopping cart including nested items."""

    items = ShoppingCartItemSerializer(many=True, read_only=True)
    total_price = serializers.SerializerMethodField()

    class Meta:
        model = ShoppingCart
        fields = ['id', 'user', 'items', 'total_price']

    def get_total_price(self, obj):
        return sum((item.subtotal for item in obj.items.all()), 0)
