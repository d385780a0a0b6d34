"""Per-module capability bundles for screens that render many action controls.

Each bundle is declared as ``(field_name, code)`` pairs and projected into a
read-only record; a field is always exactly ``can(principal, code)``. Screens
needing a compound rule compose ``can_any`` / ``can_all`` themselves instead of
adding a field here.
"""
from __future__ import annotations
from collections import namedtuple
from functools import lru_cache
from typing import Any, Dict, Tuple

from backoffice.services.catalog import PermissionKey
from backoffice.services.policy import Principal, can

CAPABILITY_DECLARATIONS: Dict[str, Tuple[Tuple[str, str], ...]] = {
    'accounting': (
        ('can_view_dashboard', 'accounting.dashboard.view_page'),
        # Segments
        ('can_view_segments', 'accounting.segments.view_page'),
        ('can_create_segment', 'accounting.segments.create'),
        ('can_update_segment', 'accounting.segments.update'),
        ('can_delete_segment', 'accounting.segments.delete'),
        # Cities
        ('can_view_cities', 'accounting.cities.view_page'),
        ('can_create_city', 'accounting.cities.create'),
        ('can_update_city', 'accounting.cities.update'),
        ('can_delete_city', 'accounting.cities.delete'),
        ('can_bulk_delete_cities', 'accounting.cities.bulk_delete'),
        # Users
        ('can_view_users', 'accounting.users.view_page'),
        ('can_create_user', 'accounting.users.create'),
        ('can_update_user', 'accounting.users.update'),
        ('can_delete_user', 'accounting.users.delete'),
        ('can_assign_segments', 'accounting.users.assign_segments'),
        ('can_assign_cities', 'accounting.users.assign_cities'),
        # Calculation sheets
        ('can_view_sheets', 'accounting.calculation_sheets.view_page'),
        ('can_view_sheet', 'accounting.calculation_sheets.view'),
        ('can_create_sheet', 'accounting.calculation_sheets.create'),
        ('can_update_sheet', 'accounting.calculation_sheets.update'),
        ('can_edit_sheet', 'accounting.calculation_sheets.edit'),
        ('can_delete_sheet', 'accounting.calculation_sheets.delete'),
        ('can_publish_sheet', 'accounting.calculation_sheets.publish'),
        ('can_duplicate_sheet', 'accounting.calculation_sheets.duplicate'),
        ('can_export_sheet', 'accounting.calculation_sheets.export'),
        # Declarations
        ('can_view_declarations', 'accounting.declarations.view_page'),
        ('can_view_all_declarations', 'accounting.declarations.view_all'),
        ('can_create_declaration', 'accounting.declarations.create'),
        ('can_fill_data', 'accounting.declarations.fill_data'),
        ('can_edit_metadata', 'accounting.declarations.edit_metadata'),
        ('can_delete_declaration', 'accounting.declarations.delete'),
        ('can_submit_declaration', 'accounting.declarations.submit'),
        ('can_approve_declaration', 'accounting.declarations.approve'),
        ('can_reject_declaration', 'accounting.declarations.reject'),
        # Projects
        ('can_view_projects', 'accounting.projects.view_page'),
        ('can_create_project', 'accounting.projects.create'),
        ('can_update_project', 'accounting.projects.update'),
        ('can_delete_project', 'accounting.projects.delete'),
        ('can_export_projects', 'accounting.projects.export'),
    ),
    'training': (
        ('can_view_formations', 'training.formations.view_page'),
        ('can_create_formation', 'training.formations.create'),
        ('can_update_formation', 'training.formations.update'),
        ('can_delete_formation', 'training.formations.delete'),
        ('can_duplicate_formation', 'training.formations.duplicate'),
        ('can_create_pack', 'training.formations.create_pack'),
        ('can_edit_content', 'training.formations.edit_content'),
        ('can_view_corps', 'training.corps.view_page'),
        ('can_create_corps', 'training.corps.create'),
        ('can_update_corps', 'training.corps.update'),
        ('can_delete_corps', 'training.corps.delete'),
        ('can_duplicate_corps', 'training.corps.duplicate'),
        # Sessions
        ('can_view_sessions', 'training.sessions.view_page'),
        ('can_create_session', 'training.sessions.create'),
        ('can_update_session', 'training.sessions.update'),
        ('can_delete_session', 'training.sessions.delete'),
        ('can_add_student', 'training.sessions.add_student'),
        ('can_edit_student', 'training.sessions.edit_student'),
        ('can_remove_student', 'training.sessions.remove_student'),
        ('can_delete_payment', 'training.sessions.delete_payment'),
        # Reporting
        ('can_view_analytics', 'training.analytics.view_page'),
        ('can_export_analytics', 'training.analytics.export'),
        ('can_view_student_reports', 'training.student_reports.view_page'),
        ('can_export_student_reports', 'training.student_reports.export'),
        # Certificates
        ('can_view_certificates', 'training.certificates.view_page'),
        ('can_view_certificate', 'training.certificates.view'),
        ('can_generate_certificate', 'training.certificates.generate'),
        ('can_update_certificate', 'training.certificates.update'),
        ('can_download_certificate', 'training.certificates.download'),
        ('can_delete_certificate', 'training.certificates.delete'),
        # Certificate templates
        ('can_view_templates', 'training.certificate_templates.view_page'),
        ('can_create_template', 'training.certificate_templates.create'),
        ('can_create_folder', 'training.certificate_templates.create_folder'),
        ('can_update_template', 'training.certificate_templates.update'),
        ('can_delete_template', 'training.certificate_templates.delete_template'),
        ('can_delete_folder', 'training.certificate_templates.delete_folder'),
        ('can_duplicate_template', 'training.certificate_templates.duplicate'),
        ('can_edit_canvas', 'training.certificate_templates.edit_canvas'),
        ('can_organize_templates', 'training.certificate_templates.organize'),
        # Forums
        ('can_view_forums', 'training.forums.view_page'),
        ('can_read_discussions', 'training.forums.view'),
        ('can_create_thread', 'training.forums.create_thread'),
        ('can_reply', 'training.forums.reply'),
        ('can_delete_forum_content', 'training.forums.delete'),
        ('can_manage_forums', 'training.forums.manage'),
        ('can_moderate', 'training.forums.moderate'),
        # Professors
        ('can_view_professors', 'training.professors.view_page'),
        ('can_create_professor', 'training.professors.create'),
        ('can_update_professor', 'training.professors.update'),
        ('can_delete_professor', 'training.professors.delete'),
        ('can_assign_professor_segments', 'training.professors.assign_segments'),
        ('can_assign_professor_cities', 'training.professors.assign_cities'),
    ),
    'hr': (
        ('can_view_workflows', 'hr.validation_workflows.view_page'),
        ('can_create_workflow', 'hr.validation_workflows.create'),
        ('can_update_workflow', 'hr.validation_workflows.update'),
        ('can_delete_workflow', 'hr.validation_workflows.delete'),
        ('can_view_schedules', 'hr.schedules.view_page'),
        ('can_manage_schedule_models', 'hr.schedules.manage_models'),
        ('can_manage_schedule_holidays', 'hr.schedules.manage_holidays'),
        ('can_view_validated_leaves', 'hr.schedules.view_validated_leaves'),
        ('can_manage_overtime', 'hr.schedules.manage_overtime'),
        # Payroll
        ('can_view_payroll', 'hr.payroll.view_page'),
        ('can_manage_payroll_periods', 'hr.payroll.manage_periods'),
        ('can_calculate_payroll', 'hr.payroll.calculate'),
        ('can_view_payslips', 'hr.payroll.view_payslips'),
        ('can_generate_payslips', 'hr.payroll.generate_payslips'),
        ('can_manage_payroll_config', 'hr.payroll.manage_config'),
        # Employee portal
        ('can_view_employee_portal', 'hr.employee_portal.view_page'),
        ('can_clock_in_out', 'hr.employee_portal.clock_in_out'),
        ('can_submit_requests', 'hr.employee_portal.submit_requests'),
        ('can_view_clocking_history', 'hr.employee_portal.view_history'),
        # Attendance
        ('can_view_attendance', 'hr.attendance.view_page'),
        ('can_view_all_attendance', 'hr.attendance.view_all'),
        ('can_edit_attendance', 'hr.attendance.edit'),
        ('can_edit_anomalies', 'hr.attendance.edit_anomalies'),
        ('can_validate_attendance', 'hr.attendance.validate'),
        ('can_export_attendance', 'hr.attendance.export'),
        ('can_approve_overtime', 'hr.attendance.approve_overtime'),
        ('can_reject_overtime', 'hr.attendance.reject_overtime'),
        # Employees
        ('can_view_employees', 'hr.employees.view_page'),
        ('can_create_employee', 'hr.employees.create'),
        ('can_update_employee', 'hr.employees.update'),
        ('can_delete_employee', 'hr.employees.delete'),
        ('can_view_salary', 'hr.employees.view_salary'),
        ('can_manage_contracts', 'hr.employees.manage_contracts'),
        ('can_manage_documents', 'hr.employees.manage_documents'),
        ('can_manage_discipline', 'hr.employees.manage_discipline'),
        # Holidays / requests / leaves
        ('can_view_holidays', 'hr.holidays.view_page'),
        ('can_manage_holidays', 'hr.holidays.manage'),
        ('can_view_requests', 'hr.requests_validation.view_page'),
        ('can_approve_request', 'hr.requests_validation.approve'),
        ('can_reject_request', 'hr.requests_validation.reject'),
        ('can_view_leaves', 'hr.leaves.view_page'),
        ('can_request_leave', 'hr.leaves.request'),
        ('can_approve_leave_n1', 'hr.leaves.approve_n1'),
        ('can_approve_leave_n2', 'hr.leaves.approve_n2'),
        ('can_approve_leave_hr', 'hr.leaves.approve_hr'),
        ('can_manage_balances', 'hr.leaves.manage_balances'),
        ('can_export_leaves', 'hr.leaves.export'),
    ),
    'commercialisation': (
        ('can_view_dashboard', 'commercialisation.dashboard.view_page'),
        ('can_view_stats', 'commercialisation.dashboard.view_stats'),
        ('can_export_stats', 'commercialisation.dashboard.export'),
        # Clients
        ('can_view_clients', 'commercialisation.clients.view_page'),
        ('can_view_client_details', 'commercialisation.clients.view'),
        ('can_create_client', 'commercialisation.clients.create'),
        ('can_update_client', 'commercialisation.clients.edit'),
        ('can_delete_client', 'commercialisation.clients.delete'),
        ('can_export_clients', 'commercialisation.clients.export'),
        # Prospects
        ('can_view_prospects', 'commercialisation.prospects.view_page'),
        ('can_view_prospect_details', 'commercialisation.prospects.view'),
        ('can_view_all_prospects', 'commercialisation.prospects.view_all'),
        ('can_create_prospect', 'commercialisation.prospects.create'),
        ('can_update_prospect', 'commercialisation.prospects.edit'),
        ('can_call_prospect', 'commercialisation.prospects.call'),
        ('can_delete_prospect', 'commercialisation.prospects.delete'),
        ('can_convert_prospect', 'commercialisation.prospects.convert'),
        ('can_import_prospects', 'commercialisation.prospects.import'),
        ('can_export_prospects', 'commercialisation.prospects.export'),
        ('can_assign_prospect', 'commercialisation.prospects.assign'),
        ('can_reinject_prospect', 'commercialisation.prospects.reinject'),
        ('can_clean_prospects', 'commercialisation.prospects.clean'),
        # Quotes
        ('can_view_devis', 'commercialisation.devis.view_page'),
        ('can_view_devis_details', 'commercialisation.devis.view'),
        ('can_create_devis', 'commercialisation.devis.create'),
        ('can_update_devis', 'commercialisation.devis.edit'),
        ('can_delete_devis', 'commercialisation.devis.delete'),
        ('can_validate_devis', 'commercialisation.devis.validate'),
        ('can_send_devis', 'commercialisation.devis.send'),
        ('can_export_devis', 'commercialisation.devis.export'),
        # Contracts
        ('can_view_contrats', 'commercialisation.contrats.view_page'),
        ('can_view_contrat_details', 'commercialisation.contrats.view'),
        ('can_create_contrat', 'commercialisation.contrats.create'),
        ('can_update_contrat', 'commercialisation.contrats.edit'),
        ('can_delete_contrat', 'commercialisation.contrats.delete'),
        ('can_sign_contrat', 'commercialisation.contrats.sign'),
        ('can_archive_contrat', 'commercialisation.contrats.archive'),
        ('can_export_contrats', 'commercialisation.contrats.export'),
    ),
    'system': (
        ('can_view_roles', 'system.roles.view_page'),
        ('can_create_role', 'system.roles.create'),
        ('can_update_role', 'system.roles.update'),
        ('can_delete_role', 'system.roles.delete'),
    ),
}


def _record_type(module: str, fields: Tuple[Tuple[str, str], ...]):
    names = [name for name, _ in fields]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ValueError(f"Duplicate capability fields in {module!r}: {duplicates}")
    for _, code in fields:
        PermissionKey.parse(code)
    type_name = ''.join(part.title() for part in module.split('_')) + 'Capabilities'
    return namedtuple(type_name, names)


CAPABILITY_TYPES = {module: _record_type(module, fields) for module, fields in CAPABILITY_DECLARATIONS.items()}


@lru_cache(maxsize=2048)
def _bundle(module: str, principal: Principal):
    fields = CAPABILITY_DECLARATIONS[module]
    return CAPABILITY_TYPES[module](*(can(principal, code) for _, code in fields))


def capabilities(principal: Principal, module: str):
    """Capability record for ``module``; cached per (module, principal role and grants)."""
    if module not in CAPABILITY_DECLARATIONS:
        raise KeyError(f"No capability bundle declared for module {module!r}")
    return _bundle(module, principal)


def all_capabilities(principal: Principal) -> Dict[str, Dict[str, Any]]:
    return {module: dict(capabilities(principal, module)._asdict()) for module in CAPABILITY_DECLARATIONS}


__all__ = ['CAPABILITY_DECLARATIONS', 'CAPABILITY_TYPES', 'capabilities', 'all_capabilities']
