from django.contrib import admin

from .models import DocumentAcknowledgement, PolicyDocument


@admin.register(PolicyDocument)
class PolicyDocumentAdmin(admin.ModelAdmin):
    list_display = ('title', 'organization', 'category', 'assigned_to', 'requires_acknowledgement', 'is_active')
    list_filter = ('category', 'assigned_to', 'requires_acknowledgement', 'is_active')
    search_fields = ('title', 'organization__name')
    filter_horizontal = ('assigned_staff',)


@admin.register(DocumentAcknowledgement)
class DocumentAcknowledgementAdmin(admin.ModelAdmin):
    list_display = ('document', 'staff', 'acknowledged_at')
    search_fields = ('document__title', 'staff__first_name', 'staff__last_name')
    raw_id_fields = ('document', 'staff')
