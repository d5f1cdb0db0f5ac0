from django.db import migrations


ROLES = (
    ('ADMIN', 'Registrar administrator'),
    ('CASHIER', 'Posts payments against financial records'),
    ('STUDENT', 'Enrolls in subjects'),
    ('TEACHER', 'Teaches scheduled course sections'),
)


def seed_roles(apps, schema_editor):
    Role = apps.get_model('accounts', 'Role')
    for name, description in ROLES:
        Role.objects.get_or_create(name=name, defaults={'description': description})


def unseed_roles(apps, schema_editor):
    Role = apps.get_model('accounts', 'Role')
    Role.objects.filter(name__in=[name for name, _ in ROLES], user_roles__isnull=True).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('accounts', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(seed_roles, unseed_roles),
    ]
