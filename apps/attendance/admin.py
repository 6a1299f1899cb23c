from django.contrib import admin

from .models import AttendanceRecord


@admin.register(AttendanceRecord)
class AttendanceRecordAdmin(admin.ModelAdmin):
    list_display = ['staff', 'locum_name', 'date', 'clock_in', 'clock_out', 'total_hours', 'status', 'is_manual_entry']
    list_filter = ['status', 'is_manual_entry', 'date']
    search_fields = ['staff__first_name', 'staff__last_name', 'locum_name']
    date_hierarchy = 'date'
    raw_id_fields = ['staff', 'shift', 'edited_by']
