"""Catalog of administrative modules subject to role permissions.
Keys are persisted inside role permission rows; never rename a key silently,
add a new one and migrate stored rows instead.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from admin_console.errors import UnknownModuleError

CAPABILITIES: Tuple[str, ...] = ('create', 'read', 'update', 'delete')


class CapabilityConstraint(str, Enum):
    NONE = 'none'
    READ_ONLY = 'read_only'
    NO_DELETE = 'no_delete'


@dataclass(frozen=True)
class ModuleDescriptor:
    key: str
    label: str
    constraint: CapabilityConstraint = CapabilityConstraint.NONE

    @classmethod
    def from_flags(cls, key: str, label: str, read_only: bool = False, no_delete: bool = False) -> 'ModuleDescriptor':
        # read_only wins over no_delete
        if read_only:
            constraint = CapabilityConstraint.READ_ONLY
        elif no_delete:
            constraint = CapabilityConstraint.NO_DELETE
        else:
            constraint = CapabilityConstraint.NONE
        return cls(key=key, label=label, constraint=constraint)

    @property
    def read_only(self) -> bool:
        return self.constraint is CapabilityConstraint.READ_ONLY

    @property
    def no_delete(self) -> bool:
        return self.constraint is CapabilityConstraint.NO_DELETE

    def allows(self, capability: str) -> bool:
        if capability not in CAPABILITIES:
            raise ValueError(f'Unknown capability: {capability}')
        if self.read_only:
            return capability == 'read'
        if self.no_delete:
            return capability != 'delete'
        return True

    def allowed_capabilities(self) -> List[str]:
        return [c for c in CAPABILITIES if self.allows(c)]


class ModuleCatalog:
    """Ordered, immutable registry of module descriptors."""

    def __init__(self, descriptors: Iterable[ModuleDescriptor]):
        self._modules: Tuple[ModuleDescriptor, ...] = tuple(descriptors)
        self._by_key: Dict[str, ModuleDescriptor] = {}
        for mod in self._modules:
            if mod.key in self._by_key:
                raise ValueError(f'Duplicate module key: {mod.key}')
            self._by_key[mod.key] = mod

    def lookup(self, key: str) -> ModuleDescriptor:
        try:
            return self._by_key[key]
        except KeyError:
            raise UnknownModuleError(key) from None

    def get(self, key: str) -> Optional[ModuleDescriptor]:
        return self._by_key.get(key)

    def keys(self) -> List[str]:
        return [m.key for m in self._modules]

    def __iter__(self) -> Iterator[ModuleDescriptor]:
        return iter(self._modules)

    def __len__(self) -> int:
        return len(self._modules)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def describe(self) -> List[dict]:
        """JSON-safe listing used by the modules endpoint."""
        return [
            {
                'key': m.key,
                'label': m.label,
                'constraint': m.constraint.value,
                'capabilities': m.allowed_capabilities(),
            }
            for m in self._modules
        ]


# (key, label, read_only, no_delete) in screen order
MODULE_DEFINITIONS: List[Tuple[str, str, bool, bool]] = [
    ('roles_permissions', 'Roles and Permissions', False, False),
    ('captain_details', 'Captain Details', False, False),
    ('captain_assignment', 'Captain Assignment', True, False),
    ('users', 'Users', False, False),
    ('customers', 'Customers', True, False),
    ('vendors', 'Vendors', False, False),
    ('explore_destination', 'Explore Destination', False, False),
    ('community_trips', 'Community', False, False),
    ('packages', 'Packages', False, False),
    ('bookings', 'Bookings', True, False),
    ('trips', 'Trips', True, False),
    ('payments', 'Payments', True, False),
    ('banner', 'Banner', False, False),
    ('coupon_details', 'Coupon Details', False, False),
    ('coupon_management', 'Coupon Management', True, False),
    ('promo_details', 'Promo Details', False, False),
    ('promo_management', 'Promo Management', True, False),
    ('reward_management', 'Reward Management', True, False),
    ('content', 'Content', False, False),
    ('notifications', 'Notifications', True, False),
    ('report', 'Report', True, False),
    ('settings', 'Settings', False, True),
]


def build_default_catalog() -> ModuleCatalog:
    return ModuleCatalog(ModuleDescriptor.from_flags(*row) for row in MODULE_DEFINITIONS)

DEFAULT_CATALOG = build_default_catalog()

# Gates the role management endpoints themselves
ROLE_ADMIN_MODULE = 'roles_permissions'
