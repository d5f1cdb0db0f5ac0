from django.contrib import admin, messages

from registrar.exceptions import RegistrarError

from .models import Enrollment, EnrollmentAction, SubjectLine
from .services import enrollment_state


class SubjectLineInline(admin.TabularInline):
    model = SubjectLine
    extra = 0
    can_delete = False
    readonly_fields = ('subject', 'section', 'status', 'remarks', 'added_at', 'dropped_at')

    def has_add_permission(self, request, obj=None):
        return False


class EnrollmentActionInline(admin.TabularInline):
    model = EnrollmentAction
    extra = 0
    can_delete = False
    readonly_fields = ('action', 'acted_by', 'remarks', 'acted_at')

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'student', 'academic_year', 'semester', 'department', 'enrollment_status', 'is_late',
                    'date_submitted')
    list_filter = ('enrollment_status', 'is_late', 'academic_year', 'semester__name', 'department')
    search_fields = ('student__username', 'student__student_number', 'student__email')
    readonly_fields = ('date_submitted', 'date_approved', 'date_rejected', 'approved_by', 'rejected_by',
                       'is_late', 'late_penalty_fee', 'created_at', 'updated_at')
    inlines = (SubjectLineInline, EnrollmentActionInline)
    actions = ('approve_selected',)

    def approve_selected(self, request, queryset):
        approved = 0
        for enrollment in queryset:
            try:
                enrollment_state.approve_enrollment(enrollment, request.user)
                approved += 1
            except RegistrarError as exc:
                self.message_user(request, f'{enrollment}: {exc.message}', level=messages.WARNING)
        self.message_user(request, f'{approved} enrollment(s) approved.')
    approve_selected.short_description = 'Approve selected enrollments'
