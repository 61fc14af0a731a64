import pytest

from admin_console.constants.modules import CapabilityConstraint, DEFAULT_CATALOG, ModuleCatalog, ModuleDescriptor
from admin_console.errors import ValidationError
from admin_console.services.matrix import (
    CapabilityGrant,
    coerce_matrix,
    empty_matrix,
    from_wire_format,
    full_matrix,
    has_capability,
    is_fully_selected,
    is_row_fully_selected,
    normalize,
    set_all,
    set_capability,
    set_row_all,
    to_wire_format,
)

ALL_TRUE = {'create': True, 'read': True, 'update': True, 'delete': True}

# M1 unconstrained, M2 read-only
SMALL = ModuleCatalog([
    ModuleDescriptor('M1', 'Module one'),
    ModuleDescriptor('M2', 'Module two', CapabilityConstraint.READ_ONLY),
])
ALL_READ_ONLY = ModuleCatalog([
    ModuleDescriptor('r1', 'R1', CapabilityConstraint.READ_ONLY),
    ModuleDescriptor('r2', 'R2', CapabilityConstraint.READ_ONLY),
])
MIXED = ModuleCatalog([
    ModuleDescriptor('a', 'A'),
    ModuleDescriptor('b', 'B', CapabilityConstraint.NO_DELETE),
    ModuleDescriptor('c', 'C', CapabilityConstraint.READ_ONLY),
])


def test_normalize_clamps_read_only_and_no_delete_modules():
    raw = {m.key: ALL_TRUE for m in DEFAULT_CATALOG}
    matrix = normalize(raw)
    for mod in DEFAULT_CATALOG:
        grant = matrix[mod.key]
        if mod.read_only:
            assert grant == CapabilityGrant(read=True)
        elif mod.no_delete:
            assert grant == CapabilityGrant(create=True, read=True, update=True, delete=False)
        else:
            assert grant == CapabilityGrant(**ALL_TRUE)


def test_normalize_fills_missing_and_drops_unknown():
    matrix = normalize({'M1': {'read': True}, 'ghost': ALL_TRUE}, SMALL)
    assert list(matrix) == ['M1', 'M2']
    assert matrix['M1'] == CapabilityGrant(read=True)
    assert matrix['M2'] == CapabilityGrant()


def test_normalize_treats_none_values_as_false():
    matrix = normalize({'M1': {'create': None, 'read': True}}, SMALL)
    assert matrix['M1'] == CapabilityGrant(read=True)


@pytest.mark.parametrize('value', ['false', 'no', 1, 0, []])
def test_normalize_rejects_non_boolean_cells(value):
    with pytest.raises(ValidationError):
        normalize({'M1': {'read': value}}, SMALL)
    with pytest.raises(ValidationError):
        from_wire_format([{'module': 'M1', 'delete': value}], SMALL)


@pytest.mark.parametrize('raw', [
    {},
    {'a': ALL_TRUE, 'b': ALL_TRUE, 'c': ALL_TRUE},
    {'b': {'delete': True}, 'c': {'create': True, 'update': True}},
    {'a': {'delete': True}, 'zzz': {'read': True}},
])
def test_normalize_is_idempotent(raw):
    once = normalize(raw, MIXED)
    assert normalize(once, MIXED) == once


def test_normalize_does_not_mutate_input():
    raw = {'c': dict(ALL_TRUE)}
    normalize(raw, MIXED)
    assert raw == {'c': ALL_TRUE}


def test_set_capability_updates_one_cell():
    start = empty_matrix(MIXED)
    after = set_capability(start, 'a', 'delete', True, MIXED)
    assert after['a'] == CapabilityGrant(delete=True)
    assert start['a'] == CapabilityGrant()
    assert after['b'] == start['b']


def test_set_capability_forbidden_cells_are_noops():
    start = set_row_all(empty_matrix(MIXED), 'b', True, MIXED)
    assert set_capability(start, 'b', 'delete', True, MIXED) == start
    for cap in ('create', 'update', 'delete'):
        assert set_capability(start, 'c', cap, True, MIXED) == start
    # read stays editable on a read-only module
    assert set_capability(start, 'c', 'read', True, MIXED)['c'] == CapabilityGrant(read=True)


def test_set_capability_unknown_module_is_noop_and_unknown_capability_raises():
    start = empty_matrix(MIXED)
    assert set_capability(start, 'nope', 'read', True, MIXED) == start
    with pytest.raises(ValueError):
        set_capability(start, 'a', 'approve', True, MIXED)


def test_row_select_scenario_on_read_only_module():
    matrix = set_row_all(empty_matrix(SMALL), 'M2', True, SMALL)
    assert matrix['M2'] == CapabilityGrant(create=False, read=True, update=False, delete=False)
    assert set_capability(matrix, 'M2', 'create', True, SMALL) == matrix
    assert is_row_fully_selected(matrix, 'M2', SMALL)
    assert not is_row_fully_selected(matrix, 'M1', SMALL)


def test_set_row_all_respects_no_delete():
    matrix = set_row_all({}, 'b', True, MIXED)
    assert matrix['b'] == CapabilityGrant(create=True, read=True, update=True, delete=False)
    assert is_row_fully_selected(matrix, 'b', MIXED)


def test_set_row_all_false_clears_row():
    matrix = set_row_all(full_matrix(MIXED), 'a', False, MIXED)
    assert matrix['a'] == CapabilityGrant()
    assert matrix['b'] == CapabilityGrant(create=True, read=True, update=True)


def test_row_fully_selected_requires_read_and_allowed_cells():
    partial = normalize({'a': {'create': True, 'update': True, 'delete': True}}, MIXED)
    assert not is_row_fully_selected(partial, 'a', MIXED)
    missing_delete = normalize({'a': {'create': True, 'read': True, 'update': True}}, MIXED)
    assert not is_row_fully_selected(missing_delete, 'a', MIXED)
    assert not is_row_fully_selected(full_matrix(MIXED), 'unknown', MIXED)


@pytest.mark.parametrize('catalog', [SMALL, ALL_READ_ONLY, MIXED, DEFAULT_CATALOG])
def test_set_all_round_trip_selection(catalog):
    some = normalize({catalog.keys()[0]: {'read': True}}, catalog)
    assert is_fully_selected(set_all(some, True, catalog), catalog)
    assert not is_fully_selected(set_all(some, False, catalog), catalog)
    assert set_all(some, False, catalog) == empty_matrix(catalog)


def test_wire_format_is_catalog_ordered_and_normalized():
    wire = to_wire_format({'c': ALL_TRUE, 'a': {'read': True}}, MIXED)
    assert [e['module'] for e in wire] == ['a', 'b', 'c']
    assert wire[0] == {'module': 'a', 'create': False, 'read': True, 'update': False, 'delete': False}
    assert wire[2] == {'module': 'c', 'create': False, 'read': True, 'update': False, 'delete': False}


def test_from_wire_format_is_order_insensitive():
    entries = [
        {'module': 'c', 'read': True},
        {'module': 'a', 'create': True, 'read': True},
        {'read': True},
    ]
    matrix = from_wire_format(entries, MIXED)
    assert list(matrix) == ['a', 'b', 'c']
    assert matrix == from_wire_format(list(reversed(entries)), MIXED)
    assert matrix['a'] == CapabilityGrant(create=True, read=True)


def test_coerce_matrix_accepts_list_mapping_or_none():
    assert coerce_matrix(None, MIXED) == empty_matrix(MIXED)
    assert coerce_matrix({'a': {'read': True}}, MIXED)['a'].read
    assert coerce_matrix([{'module': 'a', 'read': True}], MIXED)['a'].read
    with pytest.raises(ValidationError):
        coerce_matrix('everything', MIXED)
    with pytest.raises(ValidationError):
        coerce_matrix({'a': 'yes'}, MIXED)


def test_has_capability_reads_wire_entries():
    wire = to_wire_format(set_row_all({}, 'b', True, MIXED), MIXED)
    assert has_capability(wire, 'b', 'update', MIXED)
    assert not has_capability(wire, 'b', 'delete', MIXED)
    assert not has_capability(wire, 'ghost', 'read', MIXED)
