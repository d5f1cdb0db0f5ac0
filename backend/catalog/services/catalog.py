from typing import Dict, Iterable, List

from catalog.models import Subject


def _normalize_ids(subject_ids: Iterable) -> List[int]:
    out = []
    for sid in subject_ids:
        try:
            out.append(int(sid))
        except (TypeError, ValueError):
            # unparseable ids can never match; keep a sentinel so the count check fails
            out.append(-1)
    return out


def find_department_subjects(subject_ids: Iterable, department) -> Dict[int, Subject]:
    """Return {id: Subject} for the ids that exist and belong to `department`."""
    ids = _normalize_ids(subject_ids)
    if department is None or not ids:
        return {}
    qs = Subject.objects.filter(pk__in=ids, department=department)
    return {s.pk: s for s in qs}


def all_belong_to_department(subject_ids: Iterable, department) -> bool:
    ids = set(_normalize_ids(subject_ids))
    found = find_department_subjects(ids, department)
    return len(found) == len(ids)


def subjects_in_order(subject_ids: Iterable) -> List[Subject]:
    """Load subjects preserving the requested order (duplicates kept)."""
    ids = _normalize_ids(subject_ids)
    by_id = Subject.objects.in_bulk([i for i in ids if i > 0])
    return [by_id[i] for i in ids if i in by_id]


def available_subjects(department, year_level=None, semester_name=None):
    qs = Subject.objects.filter(department=department, status=Subject.Status.ACTIVE).select_related('department')
    if year_level is not None:
        qs = qs.filter(year_level=year_level)
    if semester_name:
        qs = qs.filter(semester_name=semester_name)
    return qs
