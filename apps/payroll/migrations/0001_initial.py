from decimal import Decimal
import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        ('staff', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='PayrollEntry',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('period_start', models.DateField()),
                ('period_end', models.DateField()),
                ('basic', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('allowances', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('non_taxable_allowances', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('unpaid_leave_days', models.DecimalField(decimal_places=1, default=Decimal('0'), max_digits=5)),
                ('unpaid_leave_deduction', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('gross', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('taxable', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('paye', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('personal_relief', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('nssf', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('shif', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('housing_levy', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('other_deductions', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('total_deductions', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('net', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('APPROVED', 'Approved'), ('PAID', 'Paid')], db_index=True, default='DRAFT', max_length=20)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='%(app_label)s_%(class)s_created', to=settings.AUTH_USER_MODEL)),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='%(app_label)s_%(class)s_updated', to=settings.AUTH_USER_MODEL)),
                ('organization', models.ForeignKey(help_text='Organization this record belongs to (primary isolation key)', on_delete=django.db.models.deletion.CASCADE, related_name='%(app_label)s_%(class)s_set', to='core.organization')),
                ('staff', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payroll_entries', to='staff.staffmember')),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approved_payroll_entries', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'payroll_entries',
                'ordering': ['-period_start', 'staff__first_name'],
                'indexes': [models.Index(fields=['organization', 'period_start', 'period_end'], name='payroll_org_period_idx')],
            },
        ),
        migrations.AddConstraint(
            model_name='payrollentry',
            constraint=models.UniqueConstraint(fields=('staff', 'period_start', 'period_end'), name='uq_payroll_entry_staff_period'),
        ),
    ]
