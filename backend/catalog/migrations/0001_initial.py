from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Department',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=16, unique=True)),
                ('name', models.CharField(max_length=128)),
                ('short_name', models.CharField(blank=True, max_length=32)),
            ],
            options={
                'ordering': ('code',),
            },
        ),
        migrations.CreateModel(
            name='Subject',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=32, unique=True)),
                ('title', models.CharField(max_length=128)),
                ('lecture_units', models.PositiveSmallIntegerField(default=0)),
                ('laboratory_units', models.PositiveSmallIntegerField(default=0)),
                ('total_units', models.PositiveSmallIntegerField(default=0)),
                ('year_level', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('semester_name', models.CharField(blank=True, choices=[('1st', '1st'), ('2nd', '2nd'), ('Summer', 'Summer')], max_length=8)),
                ('status', models.CharField(choices=[('active', 'Active'), ('inactive', 'Inactive')], default='active', max_length=8)),
                ('department', models.ForeignKey(on_delete=models.PROTECT, related_name='subjects', to='catalog.department')),
            ],
            options={
                'ordering': ('code',),
            },
        ),
    ]
