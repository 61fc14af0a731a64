"""Per-module capability grants for a role.

A permission matrix maps every catalog module key to a ``CapabilityGrant``.
All functions here are pure: they take a matrix (or raw mapping), return a
fresh dict and never mutate their input. ``normalize`` is the only place
module constraints are enforced; every mutator builds a raw change and runs
it through ``normalize``.

Edits to cells a module's constraint forbids (create/update/delete on a
read-only module, delete on a no-delete module) are silently ignored, the
same way the editor never offers those controls.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from admin_console.constants.modules import CAPABILITIES, DEFAULT_CATALOG, ModuleCatalog
from admin_console.errors import ValidationError


def _flag(value: Any, capability: str) -> bool:
    # JSON strings like "false" must not read as a grant
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValidationError(f'{capability} must be a boolean')
    return value


@dataclass(frozen=True)
class CapabilityGrant:
    create: bool = False
    read: bool = False
    update: bool = False
    delete: bool = False

    @classmethod
    def coerce(cls, raw: Any) -> 'CapabilityGrant':
        if raw is None:
            return cls()
        if isinstance(raw, CapabilityGrant):
            return raw
        if isinstance(raw, Mapping):
            return cls(**{c: _flag(raw.get(c), c) for c in CAPABILITIES})
        raise ValidationError(f'Invalid capability grant: {raw!r}')

    def as_dict(self) -> Dict[str, bool]:
        return {c: getattr(self, c) for c in CAPABILITIES}


PermissionMatrix = Dict[str, CapabilityGrant]
RawMatrix = Mapping[str, Any]

_NOTHING = CapabilityGrant()
_EVERYTHING = CapabilityGrant(create=True, read=True, update=True, delete=True)


def _catalog(catalog: Optional[ModuleCatalog]) -> ModuleCatalog:
    return catalog if catalog is not None else DEFAULT_CATALOG


def _check_capability(capability: str):
    if capability not in CAPABILITIES:
        raise ValueError(f'Unknown capability: {capability}')


def normalize(raw: Optional[RawMatrix], catalog: Optional[ModuleCatalog] = None) -> PermissionMatrix:
    """Clamp a raw grant mapping to the catalog.

    Produces exactly one entry per catalog module in catalog order. Missing
    modules become all-false, unknown keys are dropped.
    """
    raw = raw or {}
    out: PermissionMatrix = {}
    for mod in _catalog(catalog):
        flags = CapabilityGrant.coerce(raw.get(mod.key)).as_dict()
        out[mod.key] = CapabilityGrant(**{c: flags[c] and mod.allows(c) for c in CAPABILITIES})
    return out


def empty_matrix(catalog: Optional[ModuleCatalog] = None) -> PermissionMatrix:
    return normalize({}, catalog)


def full_matrix(catalog: Optional[ModuleCatalog] = None) -> PermissionMatrix:
    return set_all({}, True, catalog)


def set_capability(matrix: RawMatrix, module_key: str, capability: str, value: bool,
                   catalog: Optional[ModuleCatalog] = None) -> PermissionMatrix:
    _check_capability(capability)
    cat = _catalog(catalog)
    current = normalize(matrix, cat)
    mod = cat.get(module_key)
    if mod is None or not mod.allows(capability):
        return current
    raw = dict(current)
    raw[module_key] = replace(current[module_key], **{capability: bool(value)})
    return normalize(raw, cat)


def set_row_all(matrix: RawMatrix, module_key: str, checked: bool,
                catalog: Optional[ModuleCatalog] = None) -> PermissionMatrix:
    cat = _catalog(catalog)
    current = normalize(matrix, cat)
    if module_key not in cat:
        return current
    raw = dict(current)
    raw[module_key] = _EVERYTHING if checked else _NOTHING
    return normalize(raw, cat)


def is_row_fully_selected(matrix: RawMatrix, module_key: str,
                          catalog: Optional[ModuleCatalog] = None) -> bool:
    cat = _catalog(catalog)
    mod = cat.get(module_key)
    if mod is None:
        return False
    grant = normalize(matrix, cat)[module_key]
    if not grant.read:
        return False
    if not mod.read_only and not (grant.create and grant.update):
        return False
    if not mod.read_only and not mod.no_delete and not grant.delete:
        return False
    return True


def set_all(matrix: RawMatrix, checked: bool, catalog: Optional[ModuleCatalog] = None) -> PermissionMatrix:
    cat = _catalog(catalog)
    result = normalize(matrix, cat)
    for key in cat.keys():
        result = set_row_all(result, key, checked, cat)
    return result


def is_fully_selected(matrix: RawMatrix, catalog: Optional[ModuleCatalog] = None) -> bool:
    cat = _catalog(catalog)
    normalized = normalize(matrix, cat)
    return all(is_row_fully_selected(normalized, key, cat) for key in cat.keys())


def to_wire_format(matrix: RawMatrix, catalog: Optional[ModuleCatalog] = None) -> List[Dict[str, Any]]:
    """Persistence payload: one entry per catalog module, catalog order."""
    return [{'module': key, **grant.as_dict()} for key, grant in normalize(matrix, catalog).items()]


def from_wire_format(entries: Iterable[Mapping[str, Any]], catalog: Optional[ModuleCatalog] = None) -> PermissionMatrix:
    raw: Dict[str, Any] = {}
    for entry in entries or []:
        if not isinstance(entry, Mapping):
            raise ValidationError('permission entries must be objects')
        module = entry.get('module')
        if not module:
            continue
        raw[module] = entry
    return normalize(raw, catalog)


def coerce_matrix(payload: Union[None, RawMatrix, Iterable[Mapping[str, Any]]],
                  catalog: Optional[ModuleCatalog] = None) -> PermissionMatrix:
    """Accept either the wire list or a module-keyed mapping."""
    if payload is None:
        return empty_matrix(catalog)
    if isinstance(payload, Mapping):
        return normalize(payload, catalog)
    if isinstance(payload, (list, tuple)):
        return from_wire_format(payload, catalog)
    raise ValidationError('permissions must be a list of module entries or an object keyed by module')


def has_capability(permissions: Union[None, RawMatrix, Iterable[Mapping[str, Any]]], module_key: str,
                   capability: str, catalog: Optional[ModuleCatalog] = None) -> bool:
    _check_capability(capability)
    matrix = coerce_matrix(permissions, catalog)
    grant = matrix.get(module_key)
    return bool(grant and getattr(grant, capability))


__all__ = [
    'CapabilityGrant',
    'PermissionMatrix',
    'normalize',
    'empty_matrix',
    'full_matrix',
    'set_capability',
    'set_row_all',
    'is_row_fully_selected',
    'set_all',
    'is_fully_selected',
    'to_wire_format',
    'from_wire_format',
    'coerce_matrix',
    'has_capability',
]
