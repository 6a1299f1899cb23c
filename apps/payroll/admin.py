from django.contrib import admin

from .models import PayrollEntry


@admin.register(PayrollEntry)
class PayrollEntryAdmin(admin.ModelAdmin):
    list_display = ['staff', 'period_start', 'period_end', 'gross', 'total_deductions', 'net', 'status']
    list_filter = ['status', 'period_start']
    search_fields = ['staff__first_name', 'staff__last_name']
    raw_id_fields = ['staff', 'approved_by']
    readonly_fields = [
        'gross', 'taxable', 'paye', 'personal_relief', 'nssf', 'shif', 'housing_levy',
        'total_deductions', 'net', 'approved_at', 'paid_at',
    ]
