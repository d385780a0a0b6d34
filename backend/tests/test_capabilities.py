import pytest
from backoffice.services import capabilities as caps_mod
from backoffice.services.capabilities import CAPABILITY_DECLARATIONS, CAPABILITY_TYPES, all_capabilities, capabilities
from backoffice.services.policy import Principal, can


def test_each_field_equals_can():
    p = Principal(role='gerant', granted={
        'accounting.segments.view_page', 'accounting.segments.create', 'hr.leaves.request',
    })
    for module, fields in CAPABILITY_DECLARATIONS.items():
        bundle = capabilities(p, module)
        for name, code in fields:
            assert getattr(bundle, name) is can(p, code), (module, name)


def test_segment_bundle_scenario():
    p = Principal(role='gerant', granted={'accounting.segments.view_page'})
    bundle = capabilities(p, 'accounting')
    assert bundle.can_view_segments is True
    assert bundle.can_create_segment is False
    assert type(bundle).__name__ == 'AccountingCapabilities'


def test_admin_bundles_are_all_true():
    admin = Principal(role='admin')
    for module in CAPABILITY_DECLARATIONS:
        assert all(capabilities(admin, module))


def test_bundles_are_read_only():
    bundle = capabilities(Principal(role='employee'), 'system')
    with pytest.raises(AttributeError):
        bundle.can_view_roles = True


def test_bundles_are_memoized_per_principal():
    p = Principal(role='professor', granted={'training.sessions.view_page'})
    same = Principal(role='professor', granted={'training.sessions.view_page'})
    assert capabilities(p, 'training') is capabilities(same, 'training')
    other = Principal(role='professor', granted={'training.sessions.create'})
    assert capabilities(other, 'training') is not capabilities(p, 'training')


def test_unknown_module_raises():
    with pytest.raises(KeyError):
        capabilities(Principal(role='admin'), 'warehouse')


def test_all_capabilities_shape():
    out = all_capabilities(Principal(role='employee', granted={'system.roles.view_page'}))
    assert set(out) == set(CAPABILITY_DECLARATIONS)
    assert out['system'] == {
        'can_view_roles': True, 'can_create_role': False, 'can_update_role': False, 'can_delete_role': False,
    }


def test_duplicate_field_names_rejected():
    with pytest.raises(ValueError):
        caps_mod._record_type('demo', (('can_x', 'a.b.c'), ('can_x', 'a.b.d')))


def test_record_types_match_declarations():
    for module, fields in CAPABILITY_DECLARATIONS.items():
        assert CAPABILITY_TYPES[module]._fields == tuple(name for name, _ in fields)
