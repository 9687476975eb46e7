from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import User

# Avoid double registration when the module is reloaded.
if admin.site.is_registered(User):
    admin.site.unregister(User)


class CustomUserAdmin(UserAdmin):
    model = User
    list_display = ['username', 'email', 'role', 'is_locked', 'is_staff', 'phone_number']
    list_filter = UserAdmin.list_filter + ('role', 'is_locked')

    fieldsets = UserAdmin.fieldsets + (
        ('Role & Contact', {'fields': ('role', 'is_locked', 'phone_number', 'address')}),
    )


admin.site.register(User, CustomUserAdmin)
