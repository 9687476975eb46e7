"""Serializers for news and banners."""

from rest_framework import serializers

from .models import Banner, News


class NewsSerializer(serializers.ModelSerializer):
    class Meta:
        model = News
        fields = [
            'id', 'title', 'summary', 'content', 'image', 'author',
            'is_active', 'is_featured', 'views', 'created_at', 'updated_at',
        ]
        read_only_fields = ['views', 'created_at', 'updated_at']


class BannerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Banner
        fields = [
            'id', 'title', 'subtitle', 'discount_text', 'image', 'link',
            'is_active', 'sort_order', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']
