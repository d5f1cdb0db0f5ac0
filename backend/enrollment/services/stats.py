from django.db.models import Count

from enrollment.models import Enrollment


def enrollment_summary(academic_year=None, semester=None):
    """Enrollment counts by status, department and year level."""
    qs = Enrollment.objects.all()
    if academic_year:
        qs = qs.filter(academic_year_id=academic_year)
    if semester:
        qs = qs.filter(semester_id=semester) if str(semester).isdigit() else qs.filter(semester__name=semester)

    by_status = {s: 0 for s in Enrollment.Status.values}
    for row in qs.values('enrollment_status').annotate(count=Count('id')):
        by_status[row['enrollment_status']] = row['count']

    by_department = [
        {'department': r['department__code'], 'count': r['count']}
        for r in qs.values('department__code').annotate(count=Count('id')).order_by('department__code')
    ]
    by_year_level = [
        {'yearLevel': r['year_level'], 'count': r['count']}
        for r in qs.values('year_level').annotate(count=Count('id')).order_by('year_level')
    ]
    return {
        'total': qs.count(),
        'late': qs.filter(is_late=True).count(),
        'byStatus': by_status,
        'byDepartment': by_department,
        'byYearLevel': by_year_level,
    }
