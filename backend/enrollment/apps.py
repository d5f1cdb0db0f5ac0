from django.apps import AppConfig


class EnrollmentConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'enrollment'
    verbose_name = 'Enrollment'

    def ready(self):
        # import receivers so the ledger's settlement signal is handled
        from . import receivers  # noqa: F401
