"""
Leave Admin
"""

from django.contrib import admin

from .models import LeaveEntitlement, LeaveRequest, LeaveType


@admin.register(LeaveType)
class LeaveTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'organization', 'default_days', 'is_paid', 'is_active']
    list_filter = ['is_paid', 'is_active']
    search_fields = ['name', 'organization__name']
    ordering = ['organization', 'name']


@admin.register(LeaveEntitlement)
class LeaveEntitlementAdmin(admin.ModelAdmin):
    list_display = ['staff', 'leave_type', 'year', 'allocated', 'used', 'pending']
    list_filter = ['year', 'leave_type']
    search_fields = ['staff__first_name', 'staff__last_name', 'staff__email']
    raw_id_fields = ['staff']


@admin.register(LeaveRequest)
class LeaveRequestAdmin(admin.ModelAdmin):
    list_display = ['staff', 'leave_type', 'start_date', 'end_date', 'days', 'status']
    list_filter = ['status', 'leave_type', 'is_paid']
    search_fields = ['staff__first_name', 'staff__last_name', 'reason']
    date_hierarchy = 'start_date'
    raw_id_fields = ['staff', 'reviewer']
    readonly_fields = ['reviewed_at']
