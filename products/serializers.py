"""Serializers for the product catalog."""

from django.utils.text import slugify
from rest_framework import serializers

from .models import Brand, ProductCategory, Product, ProductColor


class ProductCategorySerializer(serializers.ModelSerializer):
    """Product category serializer."""

    class Meta:
        model = ProductCategory
        fields = '__all__'


class BrandSerializer(serializers.ModelSerializer):
    class Meta:
        model = Brand
        fields = ['id', 'name', 'slug', 'description', 'image', 'is_active', 'sort_order', 'created_at']
        read_only_fields = ['slug', 'created_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Brand name is required.')
        slug = slugify(value) or slugify(value, allow_unicode=True)
        clash = Brand.objects.filter(slug=slug)
        if self.instance is not None:
            clash = clash.exclude(pk=self.instance.pk)
        if clash.exists():
            raise serializers.ValidationError('A brand with this name already exists.')
        return value


class ProductColorSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductColor
        fields = ['id', 'name', 'stock']


class ProductSerializer(serializers.ModelSerializer):
    """Product serializer with nested colour stock.

    Colours are replaced wholesale when ``colors`` is sent on write.
    """

    category_name = serializers.ReadOnlyField(source='category.category_name')
    brand_name = serializers.ReadOnlyField(source='brand.name')
    colors = ProductColorSerializer(many=True, required=False)
    sale_percent = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'code', 'description', 'image',
            'price', 'old_price', 'sale_percent',
            'stock', 'in_stock', 'is_active',
            'category', 'category_name', 'brand', 'brand_name', 'colors',
        ]

    def validate(self, attrs):
        price = attrs.get('price', getattr(self.instance, 'price', None))
        if price is not None and price < 0:
            raise serializers.ValidationError({'price': 'Price must not be negative.'})
        old_price = attrs.get('old_price')
        if old_price is not None and old_price < 0:
            raise serializers.ValidationError({'old_price': 'Old price must not be negative.'})
        return attrs

    def get_sale_percent(self, obj):
        if not obj.old_price or obj.old_price <= obj.price:
            return 0
        return int(round((1 - obj.price / obj.old_price) * 100))

    def _sync_stock(self, product, colors):
        if colors is not None:
            ProductColor.objects.filter(product=product).delete()
            ProductColor.objects.bulk_create([
                ProductColor(product=product, name=c['name'], stock=c.get('stock', 0)) for c in colors
            ])
            # Total stock follows the colour breakdown when one is given.
            if colors:
                product.stock = sum(int(c.get('stock', 0) or 0) for c in colors)
        product.in_stock = product.stock > 0
        product.save(update_fields=['stock', 'in_stock'])

    def create(self, validated_data):
        colors = validated_data.pop('colors', None)
        product = Product.objects.create(**validated_data)
        self._sync_stock(product, colors)
        return product

    def update(self, instance, validated_data):
        colors = validated_data.pop('colors', None)
        instance = super().update(instance, validated_data)
        self._sync_stock(instance, colors)
        return instance
