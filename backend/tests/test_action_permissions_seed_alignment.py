from backoffice.constants.permissions import ROLE_PRESETS, SYSTEM_ROLES, ADMIN_ROLE_NAME, WILDCARD
from backoffice.services.catalog import get_catalog, all_permission_codes
from backoffice.services.capabilities import CAPABILITY_DECLARATIONS


def test_capability_codes_exist_in_catalog():
    codes = set(all_permission_codes(get_catalog()))
    declared = {code for fields in CAPABILITY_DECLARATIONS.values() for _, code in fields}
    missing = sorted(declared - codes)
    assert not missing, f"Capability fields pointing at undeclared permissions: {missing}"


def test_every_catalog_permission_has_a_capability_field():
    codes = set(all_permission_codes(get_catalog()))
    declared = {code for fields in CAPABILITY_DECLARATIONS.values() for _, code in fields}
    assert sorted(codes - declared) == []


def test_role_presets_reference_catalog_codes():
    codes = set(all_permission_codes(get_catalog()))
    for role, preset in ROLE_PRESETS.items():
        unknown = [c for c in preset if c != WILDCARD and c not in codes]
        assert not unknown, f"Preset {role} references unknown codes: {unknown}"


def test_admin_preset_is_wildcard_and_system():
    assert ROLE_PRESETS[ADMIN_ROLE_NAME] == [WILDCARD]
    assert ADMIN_ROLE_NAME in SYSTEM_ROLES
