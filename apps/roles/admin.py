from django.contrib import admin

from .models import CustomRole


@admin.register(CustomRole)
class CustomRoleAdmin(admin.ModelAdmin):
    list_display = ['name', 'organization', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'organization__name']
