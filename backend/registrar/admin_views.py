from django.apps import apps
from django.http import JsonResponse
from django.urls import reverse, NoReverseMatch
from django.contrib.admin.views.decorators import staff_member_required

REGISTRAR_APPS = ('accounts', 'catalog', 'academic_calendar', 'timetable', 'enrollment', 'finance')


@staff_member_required
def admin_counts(request):
    """Return a JSON map of admin changelist URL -> row count for registrar models.

    Used by the admin index to show how many enrollments, schedule blocks and
    ledger rows exist without opening each changelist.
    """
    data = {}
    for app_label in REGISTRAR_APPS:
        for model in apps.get_app_config(app_label).get_models():
            try:
                admin_url = reverse(f"admin:{model._meta.app_label}_{model._meta.model_name}_changelist")
            except NoReverseMatch:
                continue
            data[admin_url] = model.objects.count()

    return JsonResponse(data)
