"""Frozen permission catalog built from ``constants.permissions.PERMISSIONS_MASTER``.

The catalog is validated once when it is built; a malformed source raises
``CatalogIntegrityError`` and must abort start-up rather than be tolerated.
"""
from __future__ import annotations
import re
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from backoffice.constants.permissions import (
    PERMISSIONS_MASTER, MODULE_LABELS, MENU_LABELS, ACTION_LABELS,
)

SEGMENT_RE = re.compile(r'[a-z][a-z0-9_]*')  # always used with fullmatch
DESCRIPTOR_FIELDS = ('action', 'label', 'description', 'sort_order')


class CatalogIntegrityError(Exception):
    """The catalog source is malformed (duplicate triple, missing or invalid field)."""

    def __init__(self, message: str, triple: Sequence[Any] = ()):
        self.triple = tuple(triple)
        if self.triple:
            message = f"{message}: {'.'.join(str(p) for p in self.triple)}"
        super().__init__(message)


class MalformedPermissionCode(ValueError):
    """A string that is not ``module.menu.action`` reached a permission check."""


@dataclass(frozen=True)
class PermissionKey:
    module: str
    menu: str
    action: str

    def __post_init__(self):
        for segment in (self.module, self.menu, self.action):
            if not isinstance(segment, str) or not SEGMENT_RE.fullmatch(segment):
                raise MalformedPermissionCode(
                    f"Invalid permission segment {segment!r} in {self.module!r}.{self.menu!r}.{self.action!r}"
                )

    @classmethod
    def parse(cls, code: str) -> 'PermissionKey':
        if not isinstance(code, str) or code.count('.') != 2:
            raise MalformedPermissionCode(f"Permission code {code!r} is not module.menu.action")
        module, menu, action = code.split('.')
        return cls(module, menu, action)

    @property
    def code(self) -> str:
        return f"{self.module}.{self.menu}.{self.action}"

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True)
class ActionDescriptor:
    action: str
    label: str
    description: str
    sort_order: int


Menus = Mapping[str, Tuple[ActionDescriptor, ...]]
Catalog = Mapping[str, Menus]


def _check_token(token: Any, triple: Sequence[Any], what: str):
    if not isinstance(token, str) or not SEGMENT_RE.fullmatch(token):
        raise CatalogIntegrityError(f'Invalid {what} name', triple)


def _to_descriptor(module: str, menu: str, entry: Any) -> ActionDescriptor:
    if isinstance(entry, ActionDescriptor):
        values = [getattr(entry, f) for f in DESCRIPTOR_FIELDS]
    elif isinstance(entry, Mapping):
        missing = [f for f in DESCRIPTOR_FIELDS if entry.get(f) is None]
        if missing:
            raise CatalogIntegrityError(
                f"Missing field(s) {', '.join(missing)}", (module, menu, entry.get('action', '?'))
            )
        values = [entry[f] for f in DESCRIPTOR_FIELDS]
    elif isinstance(entry, (tuple, list)):
        if len(entry) != len(DESCRIPTOR_FIELDS) or any(v is None for v in entry):
            action = entry[0] if entry else '?'
            raise CatalogIntegrityError('Descriptor must be (action, label, description, sort_order)', (module, menu, action))
        values = list(entry)
    else:
        raise CatalogIntegrityError(f'Unsupported descriptor type {type(entry).__name__}', (module, menu, '?'))

    action, label, description, sort_order = values
    triple = (module, menu, action)
    _check_token(action, triple, 'action')
    if not isinstance(label, str) or not label.strip():
        raise CatalogIntegrityError('Empty label', triple)
    if not isinstance(description, str):
        raise CatalogIntegrityError('Description must be a string', triple)
    # bool is an int subclass; True must not pass as sort_order 1
    if isinstance(sort_order, bool) or not isinstance(sort_order, int) or sort_order <= 0:
        raise CatalogIntegrityError(f'sort_order must be a positive integer (got {sort_order!r})', triple)
    return ActionDescriptor(action=action, label=label, description=description, sort_order=sort_order)


def build_catalog(source: Mapping[str, Mapping[str, Iterable[Any]]]) -> Catalog:
    """Validate ``source`` and return it as a read-only module -> menu -> descriptors mapping.

    Modules, menus and actions keep their declaration order; ``display_order``
    gives the ``sort_order`` view used by screens.
    """
    modules: Dict[str, Menus] = {}
    for module, menus in source.items():
        _check_token(module, (module,), 'module')
        built: Dict[str, Tuple[ActionDescriptor, ...]] = {}
        for menu, entries in menus.items():
            _check_token(menu, (module, menu), 'menu')
            seen = set()
            descriptors: List[ActionDescriptor] = []
            for entry in entries:
                descriptor = _to_descriptor(module, menu, entry)
                if descriptor.action in seen:
                    raise CatalogIntegrityError('Duplicate permission', (module, menu, descriptor.action))
                seen.add(descriptor.action)
                descriptors.append(descriptor)
            built[menu] = tuple(descriptors)
        modules[module] = MappingProxyType(built)
    return MappingProxyType(modules)


@lru_cache(maxsize=None)
def get_catalog() -> Catalog:
    return build_catalog(PERMISSIONS_MASTER)


def display_order(descriptors: Iterable[ActionDescriptor]) -> List[ActionDescriptor]:
    """Descriptors by ``sort_order``; ties keep declaration order."""
    return sorted(descriptors, key=lambda d: d.sort_order)


def iter_permissions(catalog: Catalog, display: bool = False) -> Iterator[Tuple[PermissionKey, ActionDescriptor]]:
    for module, menus in catalog.items():
        for menu, descriptors in menus.items():
            for d in (display_order(descriptors) if display else descriptors):
                yield PermissionKey(module, menu, d.action), d


def count_permissions(catalog: Catalog) -> int:
    return sum(len(descriptors) for menus in catalog.values() for descriptors in menus.values())


def all_permission_codes(catalog: Catalog) -> Tuple[str, ...]:
    return tuple(key.code for key, _ in iter_permissions(catalog))


def describe(catalog: Catalog, code: str) -> Optional[ActionDescriptor]:
    key = PermissionKey.parse(code)
    for d in catalog.get(key.module, {}).get(key.menu, ()):
        if d.action == key.action:
            return d
    return None


def permission_tree(catalog: Catalog) -> List[Dict[str, Any]]:
    """Hierarchical view used by the role editor screen; actions in ``sort_order``."""
    tree = []
    for module, menus in catalog.items():
        tree.append({
            'id': module,
            'label': MODULE_LABELS.get(module, module),
            'menus': [
                {
                    'id': menu,
                    'label': MENU_LABELS.get(menu, menu),
                    'actions': [
                        {
                            'action': d.action,
                            'code': f"{module}.{menu}.{d.action}",
                            'label': d.label,
                            'action_label': ACTION_LABELS.get(d.action, d.action),
                            'description': d.description,
                            'sort_order': d.sort_order,
                        }
                        for d in display_order(descriptors)
                    ],
                }
                for menu, descriptors in menus.items()
            ],
        })
    return tree


def module_stats(catalog: Catalog) -> List[Dict[str, Any]]:
    return [
        {
            'module': module,
            'label': MODULE_LABELS.get(module, module),
            'menu_count': len(menus),
            'permission_count': sum(len(d) for d in menus.values()),
        }
        for module, menus in catalog.items()
    ]


def diff_codes(previous: Iterable[str], current: Iterable[str]) -> Dict[str, List[str]]:
    """Codes added and removed between two releases' code lists (input order kept)."""
    previous = list(previous)
    current = list(current)
    prev_set, cur_set = set(previous), set(current)
    return {
        'added': [c for c in current if c not in prev_set],
        'removed': [c for c in previous if c not in cur_set],
    }


__all__ = [
    'ActionDescriptor', 'Catalog', 'CatalogIntegrityError', 'MalformedPermissionCode', 'PermissionKey',
    'build_catalog', 'get_catalog', 'iter_permissions', 'count_permissions', 'all_permission_codes',
    'describe', 'display_order', 'permission_tree', 'module_stats', 'diff_codes',
]
