"""Serializers for the accounts app.

Includes:
- Registration with strong validation
- Profile read/update for the authenticated user
"""

import re
import phonenumbers
from django.contrib.auth import get_user_model
from rest_framework import serializers


User = get_user_model()

DEFAULT_PHONE_REGION = 'VN'


def normalize_phone(phone, field_name='phone_number'):
    """Parse a phone number (local Vietnamese or international) into E.164.

    Raises a field-keyed ValidationError when the number is not valid.
    """
    phone_input = str(phone or '').strip()
    if not phone_input:
        raise serializers.ValidationError({field_name: 'Phone number is required.'})

    # Keep a leading + only; drop spaces, dashes and dots.
    clean_phone = re.sub(r'(?<!^)\+|[^\d+]', '', phone_input)
    if clean_phone.startswith('00'):
        clean_phone = '+' + clean_phone[2:]

    try:
        parsed_phone = phonenumbers.parse(clean_phone, DEFAULT_PHONE_REGION)
        if not phonenumbers.is_valid_number(parsed_phone):
            raise ValueError
    except (phonenumbers.NumberParseException, ValueError):
        raise serializers.ValidationError({
            field_name: f'Phone number {phone_input} is not valid.'
        })
    return phonenumbers.format_number(parsed_phone, phonenumbers.PhoneNumberFormat.E164)


class RegisterSerializer(serializers.ModelSerializer):
    """Create a new shopper account.

    The ``role`` is never accepted from the client; administrators are
    promoted through the Django admin.
    """

    password = serializers.CharField(write_only=True, min_length=6)
    phone_number = serializers.CharField(required=False, allow_blank=True)

    class Meta:
        model = User
        fields = ('id', 'username', 'password', 'email', 'first_name', 'phone_number', 'address')
        read_only_fields = ('id',)

    def validate_username(self, value):
        if not re.match(r'^[a-zA-Z0-9._]+$', value):
            raise serializers.ValidationError('Username may only contain letters, digits, dots and underscores.')
        if len(value) < 4:
            raise serializers.ValidationError('Username must be at least 4 characters long.')
        return value

    def validate_email(self, value):
        email_regex = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        if not re.match(email_regex, value or ''):
            raise serializers.ValidationError('Please enter a valid email address.')
        value = value.lower().strip()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('An account with this email already exists.')
        return value

    def validate(self, attrs):
        phone = attrs.get('phone_number')
        if phone:
            attrs['phone_number'] = normalize_phone(phone)
        else:
            attrs['phone_number'] = None
        return attrs

    def create(self, validated_data):
        return User.objects.create_user(**validated_data)


class UserProfileSerializer(serializers.ModelSerializer):
    """Profile view of the authenticated user."""

    class Meta:
        model = User
        fields = ('id', 'username', 'email', 'first_name', 'last_name', 'phone_number', 'address', 'role')
        read_only_fields = ('username', 'role')

    def validate_phone_number(self, value):
        if not value:
            return None
        return normalize_phone(value)


class CustomerAdminSerializer(serializers.ModelSerializer):
    """Back-office view of a user account, with its order count."""

    order_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = User
        fields = (
            'id', 'username', 'email', 'first_name', 'last_name', 'phone_number', 'address',
            'role', 'is_locked', 'date_joined', 'order_count',
        )
        read_only_fields = ('username', 'date_joined')

    def validate_phone_number(self, value):
        if not value:
            return None
        return normalize_phone(value)

    def validate_email(self, value):
        value = (value or '').lower().strip()
        clash = User.objects.filter(email__iexact=value)
        if self.instance is not None:
            clash = clash.exclude(pk=self.instance.pk)
        if value and clash.exists():
            raise serializers.ValidationError('An account with this email already exists.')
        return value


class LockSerializer(serializers.Serializer):
    is_locked = serializers.BooleanField(required=True)

    def to_internal_value(self, data):
        # Only real booleans; "yes" or 1 are refused.
        if not isinstance(data, dict) or not isinstance(data.get('is_locked'), bool):
            raise serializers.ValidationError({'is_locked': 'is_locked must be a boolean.'})
        return super().to_internal_value(data)
