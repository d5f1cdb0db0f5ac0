from django.contrib import admin

from .models import ScheduleBlock


@admin.register(ScheduleBlock)
class ScheduleBlockAdmin(admin.ModelAdmin):
    list_display = ('course', 'section', 'teacher', 'room', 'day_of_week', 'formatted_start_time', 'formatted_end_time', 'status')
    list_filter = ('academic_year', 'day_of_week', 'status', 'schedule_type')
    search_fields = ('room', 'course__code', 'teacher__username')
    readonly_fields = ('created_by', 'created_at', 'updated_at')

    def has_delete_permission(self, request, obj=None):
        return False
