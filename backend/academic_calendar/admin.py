from django.contrib import admin

from .models import AcademicYear, HolidayBreak, Semester
from .services.calendar_authority import set_current_year


class SemesterInline(admin.StackedInline):
    model = Semester
    extra = 0
    can_delete = False


@admin.register(AcademicYear)
class AcademicYearAdmin(admin.ModelAdmin):
    list_display = ('name', 'start_date', 'end_date', 'is_current_year', 'status')
    list_filter = ('status', 'is_current_year')
    search_fields = ('name',)
    inlines = (SemesterInline,)
    actions = ('make_current',)

    def make_current(self, request, queryset):
        if queryset.count() != 1:
            self.message_user(request, 'Select exactly one academic year.')
            return
        set_current_year(queryset.first())
    make_current.short_description = 'Set as current academic year'


class HolidayBreakInline(admin.TabularInline):
    model = HolidayBreak
    extra = 0


@admin.register(Semester)
class SemesterAdmin(admin.ModelAdmin):
    list_display = ('academic_year', 'name', 'start_date', 'end_date', 'enrollment_start', 'enrollment_end', 'status')
    list_filter = ('academic_year', 'status', 'name')
    inlines = (HolidayBreakInline,)

    def has_delete_permission(self, request, obj=None):
        return False
