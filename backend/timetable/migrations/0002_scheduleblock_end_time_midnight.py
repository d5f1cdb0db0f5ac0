import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('timetable', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='scheduleblock',
            name='end_time',
            field=models.PositiveSmallIntegerField(validators=[django.core.validators.MaxValueValidator(1440)]),
        ),
    ]
