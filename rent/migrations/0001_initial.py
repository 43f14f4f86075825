import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('rooms', '0001_initial'),
        ('tenants', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='RentCycle',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('due_month', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(12)])),
                ('due_year', models.PositiveIntegerField()),
                ('due_date', models.DateField()),
                ('amount_due', models.DecimalField(decimal_places=2, help_text='Base rent for the month', max_digits=10)),
                ('late_fee_applicable', models.BooleanField(default=False)),
                ('late_fee_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('late_fee_start_date', models.DateField(blank=True, null=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('paid', 'Paid'), ('overdue', 'Overdue'), ('waived', 'Waived')], default='pending', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('room', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rent_cycles', to='rooms.room')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rent_cycles', to='tenants.tenant')),
            ],
            options={
                'db_table': 'rent_cycles',
                'ordering': ['-due_year', '-due_month'],
                'indexes': [
                    models.Index(fields=['tenant', 'status', 'due_date'], name='rent_cycle_tenant_status_idx'),
                    models.Index(fields=['due_year', 'due_month'], name='rent_cycle_period_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('tenant', 'due_month', 'due_year'), name='uniq_rent_cycle_per_tenant_month'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('payment_mode', models.CharField(choices=[('ONLINE_GATEWAY', 'Online Gateway'), ('CASH', 'Cash'), ('BANK_TRANSFER', 'Bank Transfer'), ('UPI_MANUAL', 'UPI (Manual)')], max_length=20)),
                ('payment_date', models.DateField()),
                ('is_verified', models.BooleanField(default=False)),
                ('verified_at', models.DateTimeField(blank=True, null=True)),
                ('razorpay_order_id', models.CharField(blank=True, max_length=100, null=True)),
                ('razorpay_payment_id', models.CharField(blank=True, max_length=100, null=True)),
                ('razorpay_signature', models.CharField(blank=True, max_length=255, null=True)),
                ('is_advance', models.BooleanField(default=False, help_text="Overpayment carried to a future month's cycle")),
                ('notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('received_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='received_payments', to=settings.AUTH_USER_MODEL)),
                ('rent_cycle', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payments', to='rent.rentcycle')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='tenants.tenant')),
                ('verified_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='verified_payments', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'payments',
                'ordering': ['-payment_date', '-created_at'],
                'indexes': [
                    models.Index(fields=['tenant', '-payment_date'], name='payment_tenant_date_idx'),
                    models.Index(fields=['razorpay_payment_id'], name='payment_gateway_id_idx'),
                    models.Index(fields=['payment_mode'], name='payment_mode_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('razorpay_payment_id__isnull', False)), fields=('razorpay_payment_id', 'rent_cycle'), name='uniq_gateway_payment_per_cycle'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action_type', models.CharField(choices=[('PAYMENT_RECORDED', 'Payment Recorded'), ('GATEWAY_ORDER_CREATED', 'Gateway Order Created'), ('GATEWAY_PAYMENT_VERIFIED', 'Gateway Payment Verified'), ('GATEWAY_SIGNATURE_REJECTED', 'Gateway Signature Rejected'), ('WEBHOOK_PROCESSED', 'Webhook Processed')], max_length=50)),
                ('description', models.TextField()),
                ('metadata', models.JSONField(blank=True, help_text='Additional data related to the action', null=True)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('tenant', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to='tenants.tenant')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'audit_logs',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['tenant', '-created_at'], name='audit_tenant_created_idx'),
                    models.Index(fields=['action_type'], name='audit_action_type_idx'),
                ],
            },
        ),
    ]
