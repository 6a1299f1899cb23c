"""
Document services - assignment, acknowledgement and compliance summary
"""
import logging

from django.db import IntegrityError, transaction
from django.db.models import Q

from apps.core.exceptions import PermissionDeniedException, ValidationException
from apps.roles.capabilities import Capability
from apps.staff.models import StaffMember

from .models import DocumentAcknowledgement, PolicyDocument

logger = logging.getLogger(__name__)

DOCUMENT_FIELDS = (
    'title', 'description', 'file_url', 'category', 'assigned_to',
    'assigned_roles', 'requires_acknowledgement',
)


class DocumentService:

    # ------------------------------------------------------------------
    # Management
    # ------------------------------------------------------------------
    @classmethod
    def _apply(cls, ctx, document, fields):
        assigned_staff = fields.pop('assigned_staff', None)
        for key, value in fields.items():
            if key in DOCUMENT_FIELDS:
                setattr(document, key, value)
        if not (document.title or '').strip():
            raise ValidationException('Title is required.', field='title')
        if document.assigned_to == PolicyDocument.ASSIGN_ROLES and not document.assigned_roles:
            raise ValidationException('Choose at least one role.', field='assigned_roles')
        if assigned_staff is not None:
            foreign = [s for s in assigned_staff if s.organization_id != ctx.organization_id]
            if foreign:
                raise ValidationException('Assigned staff must belong to your organization.', field='assigned_staff')
        document.save()
        if assigned_staff is not None:
            document.assigned_staff.set(assigned_staff)
        if document.assigned_to == PolicyDocument.ASSIGN_INDIVIDUALS and not document.assigned_staff.exists():
            raise ValidationException('Choose at least one staff member.', field='assigned_staff')
        return document

    @classmethod
    def create_document(cls, ctx, **fields):
        ctx.require_capability(Capability.DOCUMENTS_AND_POLICIES)
        with transaction.atomic():
            document = cls._apply(
                ctx,
                PolicyDocument(organization=ctx.organization, created_by=ctx.user),
                fields,
            )
        logger.info("document_created org=%s document=%s", ctx.organization_id, document.id)
        return document

    @classmethod
    def update_document(cls, ctx, document, **fields):
        ctx.require_capability(Capability.DOCUMENTS_AND_POLICIES)
        document.updated_by = ctx.user
        with transaction.atomic():
            return cls._apply(ctx, document, fields)

    @classmethod
    def archive_document(cls, ctx, document):
        ctx.require_capability(Capability.DOCUMENTS_AND_POLICIES)
        document.is_active = False
        document.updated_by = ctx.user
        document.save(update_fields=['is_active', 'updated_by', 'updated_at'])
        logger.info("document_archived org=%s document=%s", ctx.organization_id, document.id)
        return document

    # ------------------------------------------------------------------
    # Staff side
    # ------------------------------------------------------------------
    @staticmethod
    def documents_for_staff(staff):
        candidates = PolicyDocument.objects.filter(
            organization_id=staff.organization_id, is_active=True,
        ).filter(
            Q(assigned_to=PolicyDocument.ASSIGN_ALL)
            | Q(assigned_to=PolicyDocument.ASSIGN_ROLES)
            | Q(assigned_to=PolicyDocument.ASSIGN_INDIVIDUALS, assigned_staff=staff)
        ).distinct()
        # role lists are matched in Python
        return [
            document for document in candidates
            if document.assigned_to != PolicyDocument.ASSIGN_ROLES or document.is_assigned_to(staff)
        ]

    @classmethod
    def acknowledge(cls, ctx, document):
        """Returns ``(acknowledgement, created)``; repeat calls return the existing record."""
        staff = ctx.staff
        if staff is None:
            raise PermissionDeniedException('A staff profile is required to acknowledge documents.')
        if not document.is_active or not document.is_assigned_to(staff):
            raise PermissionDeniedException('This document is not assigned to you.')
        if not document.requires_acknowledgement:
            raise ValidationException('This document does not require acknowledgement.', field='document')

        existing = DocumentAcknowledgement.objects.filter(document=document, staff=staff).first()
        if existing is not None:
            return existing, False
        try:
            with transaction.atomic():
                ack = DocumentAcknowledgement.objects.create(
                    organization=ctx.organization, document=document, staff=staff, created_by=ctx.user,
                )
        except IntegrityError:
            return DocumentAcknowledgement.objects.get(document=document, staff=staff), False

        logger.info("document_acknowledged org=%s document=%s staff=%s", ctx.organization_id, document.id, staff.id)
        return ack, True

    @staticmethod
    def assigned_staff_for(document):
        staff = StaffMember.objects.filter(
            organization_id=document.organization_id, status=StaffMember.STATUS_ACTIVE,
        )
        if document.assigned_to == PolicyDocument.ASSIGN_INDIVIDUALS:
            return staff.filter(assigned_documents=document)
        if document.assigned_to == PolicyDocument.ASSIGN_ROLES:
            roles = list(document.assigned_roles or [])
            return staff.filter(Q(system_role__in=roles) | Q(job_title__in=roles))
        return staff

    @classmethod
    def acknowledgement_summary(cls, document):
        assigned = cls.assigned_staff_for(document)
        acknowledged_ids = set(
            DocumentAcknowledgement.objects.filter(document=document).values_list('staff_id', flat=True)
        )
        assigned_ids = set(assigned.values_list('id', flat=True))
        pending = assigned.exclude(id__in=acknowledged_ids)
        total = len(assigned_ids)
        done = len(assigned_ids & acknowledged_ids)
        return {
            'document_id': str(document.id),
            'assigned': total,
            'acknowledged': done,
            'pending': total - done,
            'completion_rate': round(done * 100 / total, 1) if total else 0.0,
            'pending_staff': [
                {'id': str(staff.id), 'name': staff.full_name} for staff in pending
            ],
        }
