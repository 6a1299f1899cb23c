"""Custom role management"""
import logging

from django.db import IntegrityError, transaction

from apps.core.exceptions import ValidationException

from .capabilities import Capability, validate_capabilities
from .models import CustomRole

logger = logging.getLogger(__name__)


class RoleService:

    @classmethod
    def create_role(cls, ctx, *, name, description='', capabilities=None):
        ctx.require_capability(Capability.SETTINGS_ADMIN)
        name = (name or '').strip()
        if not name:
            raise ValidationException('Role name is required.', field='name')
        cleaned = validate_capabilities(capabilities)

        if CustomRole.objects.filter(organization=ctx.organization, name__iexact=name).exists():
            raise ValidationException(f"A role named '{name}' already exists.", field='name')

        try:
            with transaction.atomic():
                role = CustomRole.objects.create(
                    organization=ctx.organization,
                    name=name,
                    description=description or '',
                    capabilities=cleaned,
                    created_by=ctx.user,
                )
        except IntegrityError as exc:
            raise ValidationException(f"A role named '{name}' already exists.", field='name') from exc

        logger.info(
            "custom_role_created org=%s role=%s capabilities=%s",
            ctx.organization_id, role.id, ','.join(cleaned),
        )
        return role

    @classmethod
    def update_role(cls, ctx, role, *, name=None, description=None, capabilities=None):
        ctx.require_capability(Capability.SETTINGS_ADMIN)
        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationException('Role name is required.', field='name')
            clash = (
                CustomRole.objects.filter(organization=ctx.organization, name__iexact=name)
                .exclude(pk=role.pk)
                .exists()
            )
            if clash:
                raise ValidationException(f"A role named '{name}' already exists.", field='name')
            role.name = name
        if description is not None:
            role.description = description
        if capabilities is not None:
            role.capabilities = validate_capabilities(capabilities)
        role.updated_by = ctx.user
        role.save()
        logger.info("custom_role_updated org=%s role=%s", ctx.organization_id, role.id)
        return role

    @classmethod
    def delete_role(cls, ctx, role):
        ctx.require_capability(Capability.SETTINGS_ADMIN)
        from apps.staff.models import StaffMember

        in_use = StaffMember.objects.filter(
            organization=ctx.organization, custom_role=role,
        ).exclude(status=StaffMember.STATUS_ARCHIVED).count()
        if in_use:
            raise ValidationException(
                f'This role is assigned to {in_use} staff member(s). Reassign them first.'
            )
        role.delete()
        logger.info("custom_role_deleted org=%s role=%s", ctx.organization_id, role.pk)
