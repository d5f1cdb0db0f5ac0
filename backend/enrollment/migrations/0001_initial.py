import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('academic_calendar', '0001_initial'),
        ('catalog', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Enrollment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('year_level', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('enrollment_status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=16)),
                ('date_submitted', models.DateTimeField(default=django.utils.timezone.now)),
                ('date_approved', models.DateTimeField(blank=True, null=True)),
                ('date_rejected', models.DateTimeField(blank=True, null=True)),
                ('rejection_reason', models.TextField(blank=True)),
                ('notes', models.TextField(blank=True)),
                ('is_late', models.BooleanField(default=False)),
                ('late_penalty_fee', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('academic_year', models.ForeignKey(on_delete=models.PROTECT, related_name='enrollments', to='academic_calendar.academicyear')),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=models.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('department', models.ForeignKey(blank=True, null=True, on_delete=models.PROTECT, related_name='enrollments', to='catalog.department')),
                ('rejected_by', models.ForeignKey(blank=True, null=True, on_delete=models.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('semester', models.ForeignKey(on_delete=models.PROTECT, related_name='enrollments', to='academic_calendar.semester')),
                ('student', models.ForeignKey(on_delete=models.PROTECT, related_name='enrollments', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ('-date_submitted',),
            },
        ),
        migrations.AddConstraint(
            model_name='enrollment',
            constraint=models.UniqueConstraint(fields=('student', 'academic_year', 'semester'), name='unique_enrollment_per_term'),
        ),
        migrations.CreateModel(
            name='SubjectLine',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('section', models.CharField(blank=True, max_length=16)),
                ('status', models.CharField(choices=[('enrolled', 'Enrolled'), ('dropped', 'Dropped')], default='enrolled', max_length=16)),
                ('remarks', models.CharField(blank=True, max_length=255)),
                ('order', models.PositiveIntegerField(default=0)),
                ('added_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('dropped_at', models.DateTimeField(blank=True, null=True)),
                ('enrollment', models.ForeignKey(on_delete=models.CASCADE, related_name='subject_lines', to='enrollment.enrollment')),
                ('subject', models.ForeignKey(on_delete=models.PROTECT, related_name='subject_lines', to='catalog.subject')),
            ],
            options={
                'ordering': ('enrollment', 'order', 'id'),
            },
        ),
        migrations.CreateModel(
            name='EnrollmentAction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('SUBMITTED', 'Submitted'), ('APPROVED', 'Approved'), ('REJECTED', 'Rejected'), ('SUBJECT_ADDED', 'Subject added'), ('SUBJECT_DROPPED', 'Subject dropped')], max_length=20)),
                ('remarks', models.TextField(blank=True)),
                ('acted_at', models.DateTimeField(auto_now_add=True)),
                ('acted_by', models.ForeignKey(null=True, on_delete=models.SET_NULL, related_name='enrollment_actions', to=settings.AUTH_USER_MODEL)),
                ('enrollment', models.ForeignKey(on_delete=models.CASCADE, related_name='actions', to='enrollment.enrollment')),
            ],
            options={
                'ordering': ('acted_at', 'id'),
            },
        ),
    ]
