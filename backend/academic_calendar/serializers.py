from rest_framework import serializers

from .models import AcademicYear, HolidayBreak, Semester


class HolidayBreakSerializer(serializers.ModelSerializer):
    class Meta:
        model = HolidayBreak
        fields = ('id', 'name', 'start_date', 'end_date')


class SemesterSerializer(serializers.ModelSerializer):
    holiday_breaks = HolidayBreakSerializer(many=True, required=False)

    class Meta:
        model = Semester
        fields = (
            'id', 'academic_year', 'name', 'order', 'start_date', 'end_date',
            'enrollment_start', 'enrollment_end',
            'late_enrollment_start', 'late_enrollment_end', 'late_penalty_fee',
            'add_drop_start', 'add_drop_end',
            'midterm_start', 'midterm_end', 'finals_start', 'finals_end',
            'grade_submission_deadline', 'status', 'holiday_breaks',
        )
        read_only_fields = ('academic_year',)
        extra_kwargs = {'order': {'required': False}}

    def validate(self, attrs):
        def _pair(start_key, end_key):
            start = attrs.get(start_key, getattr(self.instance, start_key, None))
            end = attrs.get(end_key, getattr(self.instance, end_key, None))
            if start and end and end < start:
                raise serializers.ValidationError({end_key: f'{end_key} must not be before {start_key}'})

        _pair('start_date', 'end_date')
        _pair('enrollment_start', 'enrollment_end')
        _pair('late_enrollment_start', 'late_enrollment_end')
        _pair('add_drop_start', 'add_drop_end')
        _pair('midterm_start', 'midterm_end')
        _pair('finals_start', 'finals_end')

        enrollment_end = attrs.get('enrollment_end', getattr(self.instance, 'enrollment_end', None))
        late_end = attrs.get('late_enrollment_end', getattr(self.instance, 'late_enrollment_end', None))
        if enrollment_end and late_end and late_end < enrollment_end:
            raise serializers.ValidationError({'late_enrollment_end': 'Late enrollment must end after regular enrollment'})
        fee = attrs.get('late_penalty_fee')
        if fee is not None and fee < 0:
            raise serializers.ValidationError({'late_penalty_fee': 'Penalty fee cannot be negative'})
        return attrs


class AcademicYearSerializer(serializers.ModelSerializer):
    semesters = SemesterSerializer(many=True, required=False)
    # switching the current year is done by calendar_authority.set_current_year
    is_current_year = serializers.BooleanField(required=False)

    class Meta:
        model = AcademicYear
        fields = ('id', 'name', 'start_date', 'end_date', 'is_current_year', 'status', 'semesters',
                  'created_at', 'updated_at')
        read_only_fields = ('created_at', 'updated_at')
        # uniqueness is reported by the service as a conflict
        extra_kwargs = {'name': {'validators': []}}
        validators = []

    def validate(self, attrs):
        start = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start and end and end < start:
            raise serializers.ValidationError({'end_date': 'end_date must not be before start_date'})
        return attrs


class AcademicYearSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = AcademicYear
        fields = ('id', 'name', 'start_date', 'end_date', 'is_current_year', 'status')


def period_details(semester):
    if semester is None:
        return None
    return {
        'enrollmentPeriod': {'start': semester.enrollment_start, 'end': semester.enrollment_end},
        'lateEnrollmentPeriod': {
            'start': semester.late_enrollment_start,
            'end': semester.late_enrollment_end,
            'penaltyFee': semester.late_penalty_fee,
        },
        'addDropPeriod': {'start': semester.add_drop_start, 'end': semester.add_drop_end},
    }
