"""Serializers for product reviews."""

from rest_framework import serializers

from .models import Review


class ReviewSerializer(serializers.ModelSerializer):
    """Review with the author's name and any admin reply.

    The product is fixed once the review exists.
    """

    username = serializers.ReadOnlyField(source='user.username')
    product_name = serializers.ReadOnlyField(source='product.name')
    rating = serializers.IntegerField(min_value=1, max_value=5)
    images = serializers.ListField(child=serializers.CharField(max_length=500), required=False)
    replied_by_name = serializers.ReadOnlyField(source='replied_by.username')

    class Meta:
        model = Review
        fields = [
            'id', 'product', 'product_name', 'user', 'username',
            'rating', 'comment', 'images',
            'reply_text', 'replied_by', 'replied_by_name', 'replied_at',
            'is_visible', 'created_at', 'updated_at',
        ]
        read_only_fields = ['user', 'reply_text', 'replied_by', 'replied_at', 'is_visible', 'created_at', 'updated_at']

    def validate_product(self, product):
        if self.instance is not None and product != self.instance.product:
            raise serializers.ValidationError('The reviewed product cannot be changed.')
        if self.instance is None and not product.is_active:
            raise serializers.ValidationError('This product is not available.')
        return product

    def validate(self, attrs):
        if self.instance is None:
            user = self.context['request'].user
            if Review.objects.filter(product=attrs['product'], user=user).exists():
                raise serializers.ValidationError({'product': 'You have already reviewed this product.'})
        return attrs


class ReplySerializer(serializers.Serializer):
    text = serializers.CharField()
