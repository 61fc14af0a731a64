"""Role names with special meaning and the default role presets."""
from __future__ import annotations
from typing import Dict, List, Tuple

# Never deletable; lower-cased, trimmed comparison
PROTECTED_ROLE_NAMES: Tuple[str, ...] = ('admin', 'super admin')

# Names treated as the same role identity for uniqueness checks only
ROLE_NAME_ALIASES: Tuple[Tuple[str, ...], ...] = (('admin', 'super admin'),)

# Role -> preset; '*' grants every capability the catalog allows
ROLE_PRESETS: Dict[str, List[str]] = {
    'Super Admin': ['*'],
    'Vendor': [],
    'Captain': [],
    'Managing Director': [],
    'CEO': [],
}

SUPER_ADMIN_ROLE = 'Super Admin'
