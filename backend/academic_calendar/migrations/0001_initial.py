from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='AcademicYear',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=32, unique=True)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField()),
                ('is_current_year', models.BooleanField(default=False)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('ongoing', 'Ongoing'), ('completed', 'Completed')], default='pending', max_length=16)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Academic Year',
                'verbose_name_plural': 'Academic Years',
                'ordering': ('-start_date',),
            },
        ),
        migrations.AddConstraint(
            model_name='academicyear',
            constraint=models.UniqueConstraint(condition=models.Q(('is_current_year', True)), fields=('is_current_year',), name='unique_current_academic_year'),
        ),
        migrations.CreateModel(
            name='Semester',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(choices=[('1st', '1st'), ('2nd', '2nd'), ('Summer', 'Summer')], max_length=8)),
                ('order', models.PositiveSmallIntegerField(default=0)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField()),
                ('enrollment_start', models.DateField(blank=True, null=True)),
                ('enrollment_end', models.DateField(blank=True, null=True)),
                ('late_enrollment_start', models.DateField(blank=True, null=True)),
                ('late_enrollment_end', models.DateField(blank=True, null=True)),
                ('late_penalty_fee', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('add_drop_start', models.DateField(blank=True, null=True)),
                ('add_drop_end', models.DateField(blank=True, null=True)),
                ('midterm_start', models.DateField(blank=True, null=True)),
                ('midterm_end', models.DateField(blank=True, null=True)),
                ('finals_start', models.DateField(blank=True, null=True)),
                ('finals_end', models.DateField(blank=True, null=True)),
                ('grade_submission_deadline', models.DateField(blank=True, null=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('ongoing', 'Ongoing'), ('completed', 'Completed')], default='pending', max_length=16)),
                ('academic_year', models.ForeignKey(on_delete=models.PROTECT, related_name='semesters', to='academic_calendar.academicyear')),
            ],
            options={
                'ordering': ('academic_year', 'order', 'start_date'),
            },
        ),
        migrations.AddConstraint(
            model_name='semester',
            constraint=models.UniqueConstraint(fields=('academic_year', 'name'), name='unique_semester_per_year'),
        ),
        migrations.CreateModel(
            name='HolidayBreak',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=128)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField()),
                ('semester', models.ForeignKey(on_delete=models.CASCADE, related_name='holiday_breaks', to='academic_calendar.semester')),
            ],
            options={
                'ordering': ('start_date',),
            },
        ),
    ]
