from django.urls import path, include
from django.contrib import admin
from django.views.generic import RedirectView
from django.http import HttpResponse

import registrar.admin_customization  # noqa: F401
from registrar import admin_views

urlpatterns = [
    path('', RedirectView.as_view(url='/admin/', permanent=False), name='registrar-home'),
    path('favicon.ico', lambda request: HttpResponse(status=204), name='favicon'),
    path('admin/dashboard-data/', admin_views.admin_counts, name='admin-dashboard-data'),
    path('admin/', admin.site.urls),
    path('api/accounts/', include('accounts.urls')),
    path('api/catalog/', include('catalog.urls')),
    path('api/calendar/', include('academic_calendar.urls')),
    path('api/schedules/', include('timetable.urls')),
    path('api/enrollments/', include('enrollment.urls')),
    path('api/financial-records/', include('finance.urls')),
]
