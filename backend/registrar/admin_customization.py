from django.contrib import admin

# Admin branding for the registrar back office.

admin.site.site_title = 'Registrar Admin'
admin.site.site_header = 'Registrar Administration'
admin.site.index_title = 'Enrollment, scheduling and billing'
