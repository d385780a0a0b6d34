import pytest
from backoffice.constants.permissions import PERMISSIONS_MASTER
from backoffice.services.catalog import (
    ActionDescriptor, CatalogIntegrityError, MalformedPermissionCode, PermissionKey,
    all_permission_codes, build_catalog, count_permissions, describe, diff_codes,
    display_order, get_catalog, module_stats, permission_tree,
)


def test_count_matches_code_list():
    catalog = get_catalog()
    codes = all_permission_codes(catalog)
    assert count_permissions(catalog) == len(codes)
    assert len(set(codes)) == len(codes)


def test_get_catalog_is_built_once():
    assert get_catalog() is get_catalog()


def test_catalog_is_read_only():
    catalog = get_catalog()
    with pytest.raises(TypeError):
        catalog['new_module'] = {}
    with pytest.raises(TypeError):
        catalog['accounting']['segments'] = ()


def test_codes_round_trip_through_key():
    for code in all_permission_codes(get_catalog()):
        key = PermissionKey.parse(code)
        assert key.code == code
        assert str(key) == code
        assert describe(get_catalog(), code) is not None


def test_authored_order_is_kept():
    catalog = get_catalog()
    assert list(catalog) == list(PERMISSIONS_MASTER)
    assert list(catalog['accounting']) == list(PERMISSIONS_MASTER['accounting'])
    assert [d.action for d in catalog['accounting']['segments']] == ['view_page', 'create', 'update', 'delete']


def test_declaration_order_kept_and_tree_uses_sort_order():
    catalog = build_catalog({'m': {'n': [
        ('third', 'Third', '', 3),
        ('first', 'First', '', 1),
        {'action': 'second', 'label': 'Second', 'description': '', 'sort_order': 2},
        ActionDescriptor('also_first', 'Also first', '', 1),
    ]}})
    assert all_permission_codes(catalog) == ('m.n.third', 'm.n.first', 'm.n.second', 'm.n.also_first')
    tree_actions = [a['action'] for a in permission_tree(catalog)[0]['menus'][0]['actions']]
    assert tree_actions == ['first', 'also_first', 'second', 'third']
    assert [d.action for d in display_order(catalog['m']['n'])] == tree_actions


def test_codes_follow_declaration_not_sort_order():
    catalog = build_catalog({'m': {'n': [('view_page', 'V', '', 2), ('create', 'C', '', 1)]}})
    assert all_permission_codes(catalog) == ('m.n.view_page', 'm.n.create')


def test_duplicate_triple_aborts_construction():
    with pytest.raises(CatalogIntegrityError) as exc:
        build_catalog({'x': {'y': [('z', 'Z', '', 1), ('z', 'Z bis', '', 2)]}})
    assert exc.value.triple == ('x', 'y', 'z')
    assert 'x.y.z' in str(exc.value)


@pytest.mark.parametrize('entry', [
    ('z', '', 'empty label', 1),
    ('z', 'Label', None, 1),
    ('z', 'Label', '', 0),
    ('z', 'Label', '', True),
    ('z', 'Label', ''),
    {'action': 'z', 'label': 'Label'},
    ('Bad-Action', 'Label', '', 1),
    ('z\n', 'Label', '', 1),
    'z',
])
def test_invalid_descriptor_rejected(entry):
    with pytest.raises(CatalogIntegrityError):
        build_catalog({'x': {'y': [entry]}})


def test_invalid_module_and_menu_names_rejected():
    with pytest.raises(CatalogIntegrityError):
        build_catalog({'Bad.Module': {'y': [('z', 'Z', '', 1)]}})
    with pytest.raises(CatalogIntegrityError):
        build_catalog({'x': {'bad menu': [('z', 'Z', '', 1)]}})


@pytest.mark.parametrize('code', ['', 'accounting', 'accounting.segments', 'a.b.c.d', 'a..c', 'A.b.c', 'a.b.c ', 'a.b.c\n', 'accounting.segments.view_page\n'])
def test_malformed_codes_raise(code):
    with pytest.raises(MalformedPermissionCode):
        PermissionKey.parse(code)


def test_malformed_code_is_a_value_error():
    with pytest.raises(ValueError):
        PermissionKey.parse(42)


def test_describe_unknown_code_returns_none():
    assert describe(get_catalog(), 'accounting.segments.fly') is None
    assert describe(get_catalog(), 'nowhere.menu.action') is None


def test_tree_and_stats_agree_with_count():
    catalog = get_catalog()
    tree = permission_tree(catalog)
    flat = [a['code'] for m in tree for menu in m['menus'] for a in menu['actions']]
    assert flat == list(all_permission_codes(catalog))
    stats = module_stats(catalog)
    assert sum(s['permission_count'] for s in stats) == count_permissions(catalog)
    by_module = {s['module']: s for s in stats}
    assert by_module['system'] == {'module': 'system', 'label': by_module['system']['label'], 'menu_count': 1, 'permission_count': 4}


def test_diff_codes():
    diff = diff_codes(['a.b.c', 'a.b.d'], ['a.b.d', 'a.b.e'])
    assert diff == {'added': ['a.b.e'], 'removed': ['a.b.c']}
    assert diff_codes([], []) == {'added': [], 'removed': []}


def test_empty_catalog():
    empty = build_catalog({})
    assert count_permissions(empty) == 0
    assert all_permission_codes(empty) == ()
