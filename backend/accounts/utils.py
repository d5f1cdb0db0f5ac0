from typing import Set

from .models import RoleName


def user_role_names(user) -> Set[str]:
    """Return the upper-cased role names held by *user*."""
    if user is None or not getattr(user, 'is_authenticated', False):
        return set()
    return {str(name).strip().upper() for name in user.roles.values_list('name', flat=True)}


def is_admin(user) -> bool:
    if user is None or not getattr(user, 'is_authenticated', False):
        return False
    if getattr(user, 'is_superuser', False):
        return True
    return RoleName.ADMIN in user_role_names(user)


def is_student(user) -> bool:
    return RoleName.STUDENT in user_role_names(user)


def is_teacher(user) -> bool:
    return RoleName.TEACHER in user_role_names(user)


def can_record_payments(user) -> bool:
    return is_admin(user) or RoleName.CASHIER in user_role_names(user)
