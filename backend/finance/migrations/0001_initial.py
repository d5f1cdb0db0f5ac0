import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('academic_calendar', '0001_initial'),
        ('enrollment', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='FinancialRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('base_fee', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('per_unit_fee', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('total_units', models.PositiveIntegerField(default=0)),
                ('tuition_total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('scholarship_type', models.CharField(choices=[('none', 'None'), ('academic', 'Academic'), ('athletic', 'Athletic'), ('government', 'Government'), ('private', 'Private'), ('institutional', 'Institutional')], default='none', max_length=16)),
                ('scholarship_name', models.CharField(blank=True, max_length=128)),
                ('scholarship_tuition_pct', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('scholarship_misc_pct', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('scholarship_lab_pct', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('scholarship_other_pct', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('total_assessment', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('total_discounts', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('total_due', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('remaining_balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('partially paid', 'Partially paid'), ('fully paid', 'Fully paid'), ('overdue', 'Overdue'), ('waived', 'Waived')], default='pending', max_length=16)),
                ('due_date', models.DateField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('academic_year', models.ForeignKey(on_delete=models.PROTECT, related_name='financial_records', to='academic_calendar.academicyear')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=models.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('enrollment_reference', models.OneToOneField(blank=True, null=True, on_delete=models.SET_NULL, related_name='financial_record', to='enrollment.enrollment')),
                ('semester', models.ForeignKey(on_delete=models.PROTECT, related_name='financial_records', to='academic_calendar.semester')),
                ('student', models.ForeignKey(on_delete=models.PROTECT, related_name='financial_records', to=settings.AUTH_USER_MODEL)),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=models.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ('-created_at',),
            },
        ),
        migrations.AddConstraint(
            model_name='financialrecord',
            constraint=models.UniqueConstraint(fields=('student', 'academic_year', 'semester'), name='unique_financial_record_per_term'),
        ),
        migrations.CreateModel(
            name='FeeItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('category', models.CharField(choices=[('misc', 'Miscellaneous'), ('lab', 'Laboratory'), ('other', 'Other')], max_length=8)),
                ('name', models.CharField(blank=True, max_length=128)),
                ('subject_code', models.CharField(blank=True, max_length=32)),
                ('amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('description', models.CharField(blank=True, max_length=255)),
                ('record', models.ForeignKey(on_delete=models.CASCADE, related_name='fee_items', to='finance.financialrecord')),
            ],
            options={
                'ordering': ('id',),
            },
        ),
        migrations.CreateModel(
            name='Discount',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('kind', models.CharField(choices=[('academic', 'Academic'), ('employee', 'Employee'), ('sibling', 'Sibling'), ('promotional', 'Promotional'), ('other', 'Other')], default='other', max_length=16)),
                ('percentage', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('description', models.CharField(blank=True, max_length=255)),
                ('record', models.ForeignKey(on_delete=models.CASCADE, related_name='discounts', to='finance.financialrecord')),
            ],
            options={
                'ordering': ('id',),
            },
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('receipt_number', models.CharField(max_length=32, unique=True)),
                ('date', models.DateTimeField(default=django.utils.timezone.now)),
                ('amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('payment_method', models.CharField(choices=[('cash', 'Cash'), ('check', 'Check'), ('bank transfer', 'Bank transfer'), ('credit card', 'Credit card'), ('debit card', 'Debit card'), ('online payment', 'Online payment'), ('scholarship', 'Scholarship')], max_length=16)),
                ('bank', models.CharField(blank=True, max_length=128)),
                ('check_number', models.CharField(blank=True, max_length=64)),
                ('reference_number', models.CharField(blank=True, max_length=64)),
                ('notes', models.TextField(blank=True)),
                ('received_by', models.ForeignKey(blank=True, null=True, on_delete=models.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('record', models.ForeignKey(on_delete=models.PROTECT, related_name='payments', to='finance.financialrecord')),
            ],
            options={
                'ordering': ('id',),
            },
        ),
    ]
