"""
Core Admin
"""

from django.contrib import admin

from .models import Location, Organization


class LocationInline(admin.TabularInline):
    model = Location
    extra = 0
    fields = ('name', 'county', 'license_number', 'is_primary', 'is_active')


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'plan', 'verification_status', 'account_status', 'is_active', 'created_at')
    list_filter = ('plan', 'verification_status', 'account_status', 'is_active')
    search_fields = ('name', 'email', 'registration_number', 'kra_pin')
    readonly_fields = ('verification_submitted_at', 'verified_at', 'verified_by', 'created_at', 'updated_at')
    inlines = [LocationInline]


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ('name', 'organization', 'county', 'is_primary', 'is_active')
    list_filter = ('is_active', 'is_primary')
    search_fields = ('name', 'organization__name', 'license_number')
