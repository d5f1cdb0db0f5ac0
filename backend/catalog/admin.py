from django.contrib import admin

from .models import Department, Subject


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ('code', 'name', 'short_name')
    search_fields = ('code', 'name')


@admin.register(Subject)
class SubjectAdmin(admin.ModelAdmin):
    list_display = ('code', 'title', 'department', 'lecture_units', 'laboratory_units', 'total_units', 'status')
    list_filter = ('department', 'status', 'semester_name')
    search_fields = ('code', 'title')
