import django.core.validators
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
            name='ScheduleSlotLock',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('resource_kind', models.CharField(choices=[('room', 'Room'), ('teacher', 'Teacher')], max_length=8)),
                ('resource_key', models.CharField(max_length=64)),
                ('day_of_week', models.PositiveSmallIntegerField(choices=[(0, 'Sunday'), (1, 'Monday'), (2, 'Tuesday'), (3, 'Wednesday'), (4, 'Thursday'), (5, 'Friday'), (6, 'Saturday')])),
            ],
        ),
        migrations.AddConstraint(
            model_name='scheduleslotlock',
            constraint=models.UniqueConstraint(fields=('resource_kind', 'resource_key', 'day_of_week'), name='unique_schedule_slot_lock'),
        ),
        migrations.CreateModel(
            name='ScheduleBlock',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('section', models.CharField(default='A', max_length=16)),
                ('schedule_type', models.CharField(choices=[('lecture', 'Lecture'), ('laboratory', 'Laboratory'), ('tutorial', 'Tutorial'), ('exam', 'Exam'), ('other', 'Other')], default='lecture', max_length=16)),
                ('room', models.CharField(max_length=64)),
                ('day_of_week', models.PositiveSmallIntegerField(choices=[(0, 'Sunday'), (1, 'Monday'), (2, 'Tuesday'), (3, 'Wednesday'), (4, 'Thursday'), (5, 'Friday'), (6, 'Saturday')], validators=[django.core.validators.MaxValueValidator(6)])),
                ('start_time', models.PositiveSmallIntegerField(validators=[django.core.validators.MaxValueValidator(1439)])),
                ('end_time', models.PositiveSmallIntegerField(validators=[django.core.validators.MaxValueValidator(1439)])),
                ('is_recurring', models.BooleanField(default=True)),
                ('specific_date', models.DateField(blank=True, null=True)),
                ('start_date', models.DateField(blank=True, null=True)),
                ('end_date', models.DateField(blank=True, null=True)),
                ('except_dates', models.JSONField(blank=True, default=list)),
                ('capacity', models.PositiveIntegerField(default=40, validators=[django.core.validators.MinValueValidator(1)])),
                ('notes', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('active', 'Active'), ('cancelled', 'Cancelled'), ('completed', 'Completed')], default='active', max_length=16)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('academic_year', models.ForeignKey(on_delete=models.PROTECT, related_name='schedule_blocks', to='academic_calendar.academicyear')),
                ('course', models.ForeignKey(on_delete=models.PROTECT, related_name='schedule_blocks', to='catalog.subject')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=models.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('teacher', models.ForeignKey(on_delete=models.PROTECT, related_name='schedule_blocks', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ('day_of_week', 'start_time'),
                'indexes': [
                    models.Index(fields=['room', 'day_of_week'], name='schedule_room_day_idx'),
                    models.Index(fields=['teacher', 'day_of_week'], name='schedule_teacher_day_idx'),
                    models.Index(fields=['course', 'academic_year'], name='schedule_course_year_idx'),
                ],
            },
        ),
    ]
