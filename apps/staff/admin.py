from django.contrib import admin

from .models import StaffInvitation, StaffMember


@admin.register(StaffMember)
class StaffMemberAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'organization', 'system_role', 'status', 'job_title', 'location')
    list_filter = ('system_role', 'status')
    search_fields = ('first_name', 'last_name', 'email', 'phone', 'organization__name')
    raw_id_fields = ('user', 'location', 'custom_role')


@admin.register(StaffInvitation)
class StaffInvitationAdmin(admin.ModelAdmin):
    list_display = ('email', 'organization', 'status', 'expires_at', 'accepted_at')
    list_filter = ('status',)
    search_fields = ('email', 'organization__name')
    readonly_fields = ('token',)
