"""Permission resolution: pure decisions over a principal's role and granted codes.

Resolution order for every check, first match wins:
  1. role is admin          -> allowed
  2. '*' is granted         -> allowed
  3. code is in the grants  -> allowed, else denied

Denial is a plain ``False``. A code that is not ``module.menu.action`` raises
``MalformedPermissionCode``; it is never turned into a denial. Codes missing
from the catalog are still evaluated against the grants.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Tuple, Union

from backoffice.constants.permissions import WILDCARD, VIEW_PAGE
from backoffice.services.catalog import Catalog, PermissionKey, MalformedPermissionCode, SEGMENT_RE

CodeLike = Union[str, PermissionKey]


class Role(str, Enum):
    ADMIN = 'admin'
    GERANT = 'gerant'
    PROFESSOR = 'professor'
    IMPRESSION = 'impression'
    EMPLOYEE = 'employee'

    @classmethod
    def parse(cls, value: Union[str, 'Role']) -> 'Role':
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown role {value!r}; expected one of {[r.value for r in cls]}") from None


@dataclass(frozen=True)
class Principal:
    role: Role
    granted: FrozenSet[str] = field(default_factory=frozenset)
    id: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, 'role', Role.parse(self.role))
        object.__setattr__(self, 'granted', frozenset(self.granted))

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def has_bypass(self) -> bool:
        return self.is_admin or WILDCARD in self.granted


def _key(code: CodeLike) -> PermissionKey:
    if isinstance(code, PermissionKey):
        return code
    return PermissionKey.parse(code)


def _segments(code: str) -> Optional[Tuple[str, str, str]]:
    parts = code.split('.')
    if len(parts) != 3:
        return None
    return parts[0], parts[1], parts[2]


def can(principal: Principal, code: CodeLike) -> bool:
    key = _key(code)
    if principal.has_bypass:
        return True
    return key.code in principal.granted


def can_any(principal: Principal, codes: Iterable[CodeLike]) -> bool:
    """True if at least one code is allowed. No codes means nothing to allow: False, admin included."""
    keys = [_key(c) for c in codes]
    if not keys:
        return False
    if principal.has_bypass:
        return True
    return any(k.code in principal.granted for k in keys)


def can_all(principal: Principal, codes: Iterable[CodeLike]) -> bool:
    """True if every code is allowed. An empty requirement is satisfied."""
    keys = [_key(c) for c in codes]
    if not keys or principal.has_bypass:
        return True
    return all(k.code in principal.granted for k in keys)


def can_action(principal: Principal, module: str, menu: str, action: str) -> bool:
    return can(principal, PermissionKey(module, menu, action))


def can_view_page(principal: Principal, module: str, menu: str) -> bool:
    return can(principal, PermissionKey(module, menu, VIEW_PAGE))


def can_access_module(principal: Principal, module: str) -> bool:
    """Module access is derived from menu-level view_page grants only."""
    if not isinstance(module, str) or not SEGMENT_RE.fullmatch(module):
        raise MalformedPermissionCode(f"Invalid module name {module!r}")
    if principal.has_bypass:
        return True
    for code in principal.granted:
        segments = _segments(code)
        if segments and segments[0] == module and segments[2] == VIEW_PAGE:
            return True
    return False


def viewable_pages(principal: Principal) -> Tuple[str, ...]:
    """Granted view_page codes, or ``('*',)`` meaning every page. Callers must not enumerate the sentinel."""
    if principal.has_bypass:
        return (WILDCARD,)
    pages = []
    for code in principal.granted:
        segments = _segments(code)
        if segments and segments[2] == VIEW_PAGE:
            pages.append(code)
    return tuple(sorted(pages))


def accessible_modules(principal: Principal, catalog: Catalog) -> Tuple[str, ...]:
    """Catalog modules (authored order) the principal can open at least one page in."""
    return tuple(m for m in catalog if can_access_module(principal, m))


__all__ = [
    'Role', 'Principal', 'can', 'can_any', 'can_all', 'can_action', 'can_view_page',
    'can_access_module', 'viewable_pages', 'accessible_modules',
]
