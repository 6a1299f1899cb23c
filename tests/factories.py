import datetime

import factory

from apps.authentication.models import User
from apps.core.context import RequestContext
from apps.core.models import Location, Organization
from apps.documents.models import PolicyDocument
from apps.leave.models import LeaveType
from apps.scheduling.models import Shift
from apps.staff.models import StaffMember


class OrganizationFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Organization

    name = factory.Sequence(lambda n: f'Clinic {n}')
    email = factory.Sequence(lambda n: f'clinic{n}@example.com')
    plan = Organization.PLAN_PROFESSIONAL


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User

    email = factory.Sequence(lambda n: f'user{n}@example.com')
    organization = factory.SubFactory(OrganizationFactory)
    password = factory.django.Password('testpass123')


class LocationFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Location

    organization = factory.SubFactory(OrganizationFactory)
    name = factory.Sequence(lambda n: f'Branch {n}')


class StaffMemberFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = StaffMember

    organization = factory.SubFactory(OrganizationFactory)
    first_name = factory.Sequence(lambda n: f'Staff{n}')
    last_name = 'Wanjiku'
    email = factory.Sequence(lambda n: f'staff{n}@example.com')
    system_role = StaffMember.ROLE_EMPLOYEE


class LeaveTypeFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = LeaveType
        django_get_or_create = ('organization', 'name')

    organization = factory.SubFactory(OrganizationFactory)
    name = 'Annual Leave'
    default_days = 21
    is_paid = True


class ShiftFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Shift

    location = factory.SubFactory(LocationFactory)
    organization = factory.SelfAttribute('location.organization')
    date = factory.LazyFunction(lambda: datetime.date.today() + datetime.timedelta(days=1))
    start_time = datetime.time(8, 0)
    end_time = datetime.time(16, 0)
    staff_needed = 1


class PolicyDocumentFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = PolicyDocument

    organization = factory.SubFactory(OrganizationFactory)
    title = factory.Sequence(lambda n: f'Policy {n}')
    assigned_to = PolicyDocument.ASSIGN_ALL
    requires_acknowledgement = True


def make_member(organization, role=StaffMember.ROLE_EMPLOYEE, capabilities=None, **fields):
    """Staff profile with a linked login in ``organization``."""
    user = UserFactory(organization=organization)
    staff = StaffMemberFactory(
        organization=organization,
        user=user,
        system_role=role,
        capabilities=capabilities or [],
        email=user.email,
        **fields,
    )
    return user, staff


def make_context(staff):
    return RequestContext.for_user(User.objects.get(pk=staff.user_id))
