"""Role codes for users, approval records and office actions.
Codes are persisted on users and approval rows; never rename silently.
"""
from __future__ import annotations
from typing import Dict, FrozenSet

ROLE_STUDENT = 'student'
ROLE_TEACHER = 'teacher'
ROLE_KYOTO = 'kyoto'
ROLE_VICE_PRINCIPAL = 'vice_principal'
ROLE_PRINCIPAL = 'principal'
ROLE_OFFICE_CHIEF = 'office_chief'
ROLE_CHAIRMAN = 'chairman'
ROLE_ACCOUNTING = 'accounting'

ALL_ROLES = (
    ROLE_STUDENT, ROLE_TEACHER, ROLE_KYOTO, ROLE_VICE_PRINCIPAL,
    ROLE_PRINCIPAL, ROLE_OFFICE_CHIEF, ROLE_CHAIRMAN, ROLE_ACCOUNTING,
)

# Roles that see every department's requests
ADMIN_ROLES: FrozenSet[str] = frozenset({
    ROLE_KYOTO, ROLE_VICE_PRINCIPAL, ROLE_PRINCIPAL,
    ROLE_OFFICE_CHIEF, ROLE_CHAIRMAN, ROLE_ACCOUNTING,
})

# Roles allowed to prepare and hand out cash once a request is fully approved
OFFICE_ROLES: FrozenSet[str] = frozenset({ROLE_ACCOUNTING, ROLE_OFFICE_CHIEF})

ROLE_LABELS: Dict[str, str] = {
    ROLE_STUDENT: '生徒',
    ROLE_TEACHER: '担当教員',
    ROLE_KYOTO: '教頭',
    ROLE_VICE_PRINCIPAL: '副校長',
    ROLE_PRINCIPAL: '校長',
    ROLE_OFFICE_CHIEF: '事務長',
    ROLE_CHAIRMAN: '理事長',
    ROLE_ACCOUNTING: '出納・事務室',
}


def is_admin_role(role: str) -> bool:
    return role in ADMIN_ROLES


def is_office_role(role: str) -> bool:
    return role in OFFICE_ROLES


__all__ = [
    'ROLE_STUDENT', 'ROLE_TEACHER', 'ROLE_KYOTO', 'ROLE_VICE_PRINCIPAL', 'ROLE_PRINCIPAL',
    'ROLE_OFFICE_CHIEF', 'ROLE_CHAIRMAN', 'ROLE_ACCOUNTING', 'ALL_ROLES', 'ADMIN_ROLES',
    'OFFICE_ROLES', 'ROLE_LABELS', 'is_admin_role', 'is_office_role',
]
