from django.contrib import admin

from .models import Shift, ShiftAssignment


class ShiftAssignmentInline(admin.TabularInline):
    model = ShiftAssignment
    extra = 0
    fields = ('staff', 'is_locum', 'locum_name', 'locum_phone', 'locum_rate_cents')
    raw_id_fields = ('staff',)


@admin.register(Shift)
class ShiftAdmin(admin.ModelAdmin):
    list_display = ('date', 'start_time', 'end_time', 'location', 'role_required', 'staff_needed')
    list_filter = ('date', 'location')
    search_fields = ('role_required', 'notes', 'location__name')
    date_hierarchy = 'date'
    inlines = [ShiftAssignmentInline]
