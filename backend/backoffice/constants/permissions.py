"""Central permission catalog source: every grantable ``module.menu.action`` lives here.

Extend cautiously; never rename codes silently. Add the new action, seed it, and
migrate grants off the old code before removing it (``seed_authz.py --validate``
reports grants left dangling by a removed code).

Entries are ``(action, label, description, sort_order)``. Modules, menus and
actions are listed in the order screens render them; keep that order when editing.
"""
from __future__ import annotations
from typing import Dict, List, Tuple

WILDCARD = '*'
VIEW_PAGE = 'view_page'

PERMISSIONS_MASTER: Dict[str, Dict[str, Tuple[Tuple[str, str, str, int], ...]]] = {
    'accounting': {
        'dashboard': (
            ('view_page', "Voir le tableau de bord", "Permet d'accéder au tableau de bord principal avec les statistiques générales", 1),
        ),
        'segments': (
            ('view_page', "Voir la page des segments", "Permet d'accéder à la liste des segments", 1),
            ('create', "Créer un segment", "Permet de créer un nouveau segment de formation", 2),
            ('update', "Modifier un segment", "Permet de modifier les informations d'un segment existant", 3),
            ('delete', "Supprimer un segment", "Permet de supprimer définitivement un segment", 4),
        ),
        'cities': (
            ('view_page', "Voir la page des villes", "Permet d'accéder à la liste des villes", 1),
            ('create', "Créer une ville", "Permet d'ajouter une nouvelle ville au système", 2),
            ('update', "Modifier une ville", "Permet de modifier les informations d'une ville", 3),
            ('delete', "Supprimer une ville", "Permet de supprimer une ville du système", 4),
            ('bulk_delete', "Suppression en masse", "Permet de supprimer plusieurs villes en une seule action", 5),
        ),
        'users': (
            ('view_page', "Voir la page des utilisateurs", "Permet d'accéder à la liste des utilisateurs du système", 1),
            ('create', "Créer un utilisateur", "Permet de créer un nouveau compte utilisateur", 2),
            ('update', "Modifier un utilisateur", "Permet de modifier les informations d'un utilisateur", 3),
            ('delete', "Supprimer un utilisateur", "Permet de supprimer un compte utilisateur", 4),
            ('assign_segments', "Assigner des segments", "Permet d'attribuer des segments à un utilisateur pour limiter son accès", 5),
            ('assign_cities', "Assigner des villes", "Permet d'attribuer des villes à un utilisateur pour limiter son accès", 6),
        ),
        'calculation_sheets': (
            ('view_page', "Voir la page des fiches", "Permet d'accéder à la liste des fiches de calcul", 1),
            ('view', "Voir les détails", "Permet de consulter le contenu d'une fiche de calcul", 2),
            ('create', "Créer une fiche", "Permet de créer une nouvelle fiche de calcul", 3),
            ('update', "Modifier une fiche", "Permet de modifier les métadonnées d'une fiche", 4),
            ('edit', "Éditer le contenu", "Permet d'éditer les cellules et formules de la fiche", 5),
            ('delete', "Supprimer une fiche", "Permet de supprimer définitivement une fiche de calcul", 6),
            ('publish', "Publier une fiche", "Permet de publier une fiche pour qu'elle soit accessible aux professeurs", 7),
            ('duplicate', "Dupliquer une fiche", "Permet de créer une copie d'une fiche existante", 8),
            ('export', "Exporter une fiche", "Permet d'exporter les données au format Excel", 9),
        ),
        'declarations': (
            ('view_page', "Voir la page des déclarations", "Permet d'accéder à la liste des déclarations", 1),
            ('view_all', "Voir toutes les déclarations", "Permet de voir les déclarations de tous les utilisateurs", 2),
            ('create', "Créer une déclaration", "Permet de créer une nouvelle déclaration", 3),
            ('fill_data', "Remplir les données", "Permet de saisir les données dans une déclaration", 4),
            ('edit_metadata', "Modifier les métadonnées", "Permet de modifier les informations générales de la déclaration", 5),
            ('delete', "Supprimer une déclaration", "Permet de supprimer définitivement une déclaration", 6),
            ('submit', "Soumettre une déclaration", "Permet de soumettre une déclaration pour approbation", 7),
            ('approve', "Approuver une déclaration", "Permet d'approuver une déclaration soumise", 8),
            ('reject', "Rejeter une déclaration", "Permet de rejeter une déclaration avec un commentaire", 9),
        ),
        'projects': (
            ('view_page', "Voir la page des projets", "Permet d'accéder à la liste des projets", 1),
            ('create', "Créer un projet", "Permet de créer un nouveau projet", 2),
            ('update', "Modifier un projet", "Permet de modifier les informations d'un projet", 3),
            ('delete', "Supprimer un projet", "Permet de supprimer un projet", 4),
            ('export', "Exporter les projets", "Permet d'exporter la liste des projets", 5),
        ),
    },
    'training': {
        'formations': (
            ('view_page', "Voir la page des formations", "Permet d'accéder à la liste des formations", 1),
            ('create', "Créer une formation", "Permet de créer une nouvelle formation", 2),
            ('update', "Modifier une formation", "Permet de modifier les informations d'une formation", 3),
            ('delete', "Supprimer une formation", "Permet de supprimer une formation et son contenu", 4),
            ('duplicate', "Dupliquer une formation", "Permet de créer une copie d'une formation existante", 5),
            ('create_pack', "Créer un pack", "Permet de regrouper plusieurs formations en un pack", 6),
            ('edit_content', "Éditer le contenu", "Permet d'ajouter/modifier des modules, vidéos et tests", 7),
        ),
        'corps': (
            ('view_page', "Voir les corps de formation", "Permet de voir les catégories de formations", 1),
            ('create', "Créer un corps", "Permet de créer une nouvelle catégorie de formations", 2),
            ('update', "Modifier un corps", "Permet de modifier une catégorie de formations", 3),
            ('delete', "Supprimer un corps", "Permet de supprimer une catégorie (formations incluses)", 4),
            ('duplicate', "Dupliquer un corps", "Permet de dupliquer une catégorie avec ses formations", 5),
        ),
        'sessions': (
            ('view_page', "Voir la page des sessions", "Permet d'accéder à la liste des sessions de formation", 1),
            ('create', "Créer une session", "Permet de créer une nouvelle session de formation", 2),
            ('update', "Modifier une session", "Permet de modifier les informations d'une session", 3),
            ('delete', "Supprimer une session", "Permet de supprimer une session et ses inscriptions", 4),
            ('add_student', "Ajouter un étudiant", "Permet d'inscrire un étudiant à la session", 5),
            ('edit_student', "Modifier un étudiant", "Permet de modifier l'inscription d'un étudiant", 6),
            ('remove_student', "Retirer un étudiant", "Permet de retirer un étudiant inscrit à une session", 7),
            ('delete_payment', "Supprimer un paiement", "Permet de supprimer un paiement enregistré (opération sensible)", 8),
        ),
        'analytics': (
            ('view_page', "Voir la page analytics", "Permet d'accéder aux statistiques de formation", 1),
            ('export', "Exporter les analytics", "Permet d'exporter les statistiques au format Excel", 2),
        ),
        'student_reports': (
            ('view_page', "Voir les rapports", "Permet d'accéder aux rapports de progression des étudiants", 1),
            ('export', "Exporter les rapports", "Permet d'exporter les rapports étudiants", 2),
        ),
        'certificates': (
            ('view_page', "Voir la page des certificats", "Permet d'accéder à la liste des certificats générés", 1),
            ('view', "Voir un certificat", "Permet de visualiser un certificat spécifique", 2),
            ('generate', "Générer un certificat", "Permet de générer un certificat pour un étudiant", 3),
            ('update', "Modifier un certificat", "Permet de modifier les informations d'un certificat", 4),
            ('download', "Télécharger un certificat", "Permet de télécharger le PDF du certificat", 5),
            ('delete', "Supprimer un certificat", "Permet de révoquer/supprimer un certificat", 6),
        ),
        'certificate_templates': (
            ('view_page', "Voir la page des templates", "Permet d'accéder à la liste des modèles de certificats", 1),
            ('create', "Créer un template", "Permet de créer un nouveau modèle de certificat", 2),
            ('create_folder', "Créer un dossier", "Permet de créer un dossier pour organiser les templates", 3),
            ('update', "Modifier un template", "Permet de modifier un modèle de certificat", 4),
            ('delete_template', "Supprimer un template", "Permet de supprimer un modèle de certificat", 5),
            ('delete_folder', "Supprimer un dossier", "Permet de supprimer un dossier de templates", 6),
            ('duplicate', "Dupliquer un template", "Permet de créer une copie d'un modèle", 7),
            ('edit_canvas', "Éditer le design", "Permet d'utiliser l'éditeur visuel pour personnaliser le certificat", 8),
            ('organize', "Organiser les templates", "Permet de déplacer les templates entre dossiers", 9),
        ),
        'forums': (
            ('view_page', "Voir la page des forums", "Permet d'accéder à la modération des forums", 1),
            ('view', "Voir les discussions", "Permet de lire les discussions des forums", 2),
            ('create_thread', "Créer une discussion", "Permet de créer une nouvelle discussion", 3),
            ('reply', "Répondre", "Permet de répondre aux discussions", 4),
            ('delete', "Supprimer", "Permet de supprimer des messages ou discussions", 5),
            ('manage', "Gérer les forums", "Permet d'épingler/verrouiller des discussions", 6),
            ('moderate', "Modérer", "Permet de modérer le contenu des forums", 7),
        ),
        'professors': (
            ('view_page', "Voir la page des professeurs", "Permet d'accéder à la liste des professeurs", 1),
            ('create', "Créer un professeur", "Permet de créer un nouveau compte professeur", 2),
            ('update', "Modifier un professeur", "Permet de modifier les informations d'un professeur", 3),
            ('delete', "Supprimer un professeur", "Permet de supprimer un compte professeur", 4),
            ('assign_segments', "Affecter des segments", "Permet d'assigner des segments à un professeur", 5),
            ('assign_cities', "Affecter des villes", "Permet d'assigner des villes à un professeur", 6),
        ),
    },
    'hr': {
        'validation_workflows': (
            ('view_page', "Voir la page des boucles", "Permet d'accéder à la gestion des workflows de validation", 1),
            ('create', "Créer une boucle", "Permet de créer un nouveau workflow de validation", 2),
            ('update', "Modifier une boucle", "Permet de modifier les étapes d'un workflow", 3),
            ('delete', "Supprimer une boucle", "Permet de supprimer un workflow de validation", 4),
        ),
        'schedules': (
            ('view_page', "Voir la page des horaires", "Permet d'accéder à la gestion des plannings", 1),
            ('manage_models', "Gérer les modèles", "Permet de créer/modifier des modèles d'horaires", 2),
            ('manage_holidays', "Gérer les jours fériés", "Permet de définir les jours fériés", 3),
            ('view_validated_leaves', "Voir les congés validés", "Permet de consulter le calendrier des congés approuvés", 4),
            ('manage_overtime', "Gérer les heures sup", "Permet de gérer les demandes d'heures supplémentaires", 5),
        ),
        'payroll': (
            ('view_page', "Voir la page de paie", "Permet d'accéder au module de gestion de la paie", 1),
            ('manage_periods', "Gérer les périodes", "Permet de créer/clôturer des périodes de paie", 2),
            ('calculate', "Calculer la paie", "Permet de lancer le calcul des salaires", 3),
            ('view_payslips', "Voir les fiches de paie", "Permet de consulter les bulletins de salaire", 4),
            ('generate_payslips', "Générer les fiches", "Permet de générer les bulletins de salaire PDF", 5),
            ('manage_config', "Configurer la paie", "Permet de configurer les règles de calcul de paie", 6),
        ),
        'employee_portal': (
            ('view_page', "Voir la page de pointage", "Permet d'accéder à la gestion des pointages", 1),
            ('clock_in_out', "Pointer", "Permet d'enregistrer les entrées/sorties", 2),
            ('submit_requests', "Soumettre des demandes", "Permet de faire des demandes de congés/absences", 3),
            ('view_history', "Voir l'historique", "Permet de consulter l'historique des pointages", 4),
        ),
        'attendance': (
            ('view_page', "Voir la page de présence", "Permet d'accéder à la gestion des présences", 1),
            ('view_all', "Voir toutes les présences", "Permet de voir les pointages de tous les employés", 2),
            ('edit', "Modifier les présences", "Permet de corriger les enregistrements de présence", 3),
            ('edit_anomalies', "Traiter les anomalies", "Permet de résoudre les anomalies de pointage", 4),
            ('validate', "Valider les présences", "Permet de valider les pointages du mois", 5),
            ('export', "Exporter les présences", "Permet d'exporter les données de présence", 6),
            ('approve_overtime', "Approuver heures supplémentaires", "Permet d'approuver les demandes d'heures supplémentaires", 7),
            ('reject_overtime', "Rejeter heures supplémentaires", "Permet de rejeter les demandes d'heures supplémentaires", 8),
        ),
        'employees': (
            ('view_page', "Voir la page des employés", "Permet d'accéder aux dossiers des employés", 1),
            ('create', "Créer un employé", "Permet de créer un nouveau dossier employé", 2),
            ('update', "Modifier un employé", "Permet de modifier les informations d'un employé", 3),
            ('delete', "Supprimer un employé", "Permet de supprimer un dossier employé", 4),
            ('view_salary', "Voir le salaire", "Permet de consulter les informations salariales", 5),
            ('manage_contracts', "Gérer les contrats", "Permet de gérer les contrats de travail", 6),
            ('manage_documents', "Gérer les documents", "Permet de gérer les documents de l'employé", 7),
            ('manage_discipline', "Gérer la discipline", "Permet de gérer les dossiers disciplinaires", 8),
        ),
        'holidays': (
            ('view_page', "Voir les jours fériés", "Permet de consulter la liste des jours fériés", 1),
            ('manage', "Gérer les jours fériés", "Permet de créer, modifier et supprimer des jours fériés", 2),
        ),
        'requests_validation': (
            ('view_page', "Voir la page de validation", "Permet d'accéder aux demandes à valider", 1),
            ('approve', "Approuver une demande", "Permet d'approuver les demandes de congés/absences", 2),
            ('reject', "Rejeter une demande", "Permet de rejeter une demande avec motif", 3),
        ),
        'leaves': (
            ('view_page', "Voir les congés", "Permet de consulter les demandes de congés", 1),
            ('request', "Demander un congé", "Permet de soumettre une demande de congé", 2),
            ('approve_n1', "Approuver (N+1)", "Permet au manager direct d'approuver", 3),
            ('approve_n2', "Approuver (N+2)", "Permet au manager supérieur d'approuver", 4),
            ('approve_hr', "Approuver (RH)", "Permet aux RH de valider définitivement", 5),
            ('manage_balances', "Gérer les soldes", "Permet de modifier les soldes de congés", 6),
            ('export', "Exporter les congés", "Permet d'exporter les données de congés", 7),
        ),
    },
    'commercialisation': {
        'dashboard': (
            ('view_page', "Voir le tableau de bord", "Permet d'accéder aux statistiques commerciales", 1),
            ('view_stats', "Voir les statistiques", "Permet de consulter les KPIs commerciaux", 2),
            ('export', "Exporter le dashboard", "Permet d'exporter les statistiques", 3),
        ),
        'clients': (
            ('view_page', "Voir la page des clients", "Permet d'accéder à la liste des clients", 1),
            ('view', "Voir un client", "Permet de consulter la fiche d'un client", 2),
            ('create', "Créer un client", "Permet de créer une nouvelle fiche client", 3),
            ('edit', "Modifier un client", "Permet de modifier les informations d'un client", 4),
            ('delete', "Supprimer un client", "Permet de supprimer un client", 5),
            ('export', "Exporter les clients", "Permet d'exporter la liste des clients", 6),
        ),
        'prospects': (
            ('view_page', "Voir la page des prospects", "Permet d'accéder à la liste des prospects", 1),
            ('view', "Voir un prospect", "Permet de consulter la fiche d'un prospect", 2),
            ('view_all', "Voir tous les prospects", "Permet de voir les prospects de tous les commerciaux", 3),
            ('create', "Créer un prospect", "Permet d'ajouter un nouveau prospect", 4),
            ('edit', "Modifier un prospect", "Permet de modifier les informations d'un prospect", 5),
            ('call', "Appeler un prospect", "Permet d'enregistrer un appel téléphonique", 6),
            ('delete', "Supprimer un prospect", "Permet de supprimer un prospect", 7),
            ('convert', "Convertir en client", "Permet de transformer un prospect en client", 8),
            ('import', "Importer des prospects", "Permet d'importer des prospects depuis un fichier", 9),
            ('export', "Exporter les prospects", "Permet d'exporter la liste des prospects", 10),
            ('assign', "Assigner un prospect", "Permet d'attribuer un prospect à un commercial", 11),
            ('reinject', "Réinjecter un prospect", "Permet de remettre un prospect dans le pool", 12),
            ('clean', "Nettoyer les prospects", "Permet de supprimer les prospects obsolètes/doublons", 13),
        ),
        'devis': (
            ('view_page', "Voir la page des devis", "Permet d'accéder à la liste des devis", 1),
            ('view', "Voir un devis", "Permet de consulter un devis", 2),
            ('create', "Créer un devis", "Permet de créer un nouveau devis", 3),
            ('edit', "Modifier un devis", "Permet de modifier un devis existant", 4),
            ('delete', "Supprimer un devis", "Permet de supprimer un devis", 5),
            ('validate', "Valider un devis", "Permet de valider un devis pour envoi", 6),
            ('send', "Envoyer un devis", "Permet d'envoyer le devis au client", 7),
            ('export', "Exporter les devis", "Permet d'exporter la liste des devis", 8),
        ),
        'contrats': (
            ('view_page', "Voir la page des contrats", "Permet d'accéder à la liste des contrats", 1),
            ('view', "Voir un contrat", "Permet de consulter un contrat", 2),
            ('create', "Créer un contrat", "Permet de créer un nouveau contrat", 3),
            ('edit', "Modifier un contrat", "Permet de modifier un contrat", 4),
            ('delete', "Supprimer un contrat", "Permet de supprimer un contrat", 5),
            ('sign', "Signer un contrat", "Permet de marquer un contrat comme signé", 6),
            ('archive', "Archiver un contrat", "Permet d'archiver un contrat terminé", 7),
            ('export', "Exporter les contrats", "Permet d'exporter la liste des contrats", 8),
        ),
    },
    'system': {
        'roles': (
            ('view_page', "Voir la page des rôles", "Permet d'accéder à la gestion des rôles et permissions", 1),
            ('create', "Créer un rôle", "Permet de créer un nouveau rôle avec des permissions personnalisées", 2),
            ('update', "Modifier un rôle", "Permet de modifier les permissions d'un rôle existant", 3),
            ('delete', "Supprimer un rôle", "Permet de supprimer un rôle (si aucun utilisateur n'y est assigné)", 4),
        ),
    },
}

MODULE_LABELS: Dict[str, str] = {
    'accounting': 'Gestion Comptable',
    'training': 'Formation en Ligne',
    'hr': 'Ressources Humaines',
    'commercialisation': 'Commercialisation',
    'system': 'Système',
}

MENU_LABELS: Dict[str, str] = {
    'dashboard': 'Tableau de bord',
    'segments': 'Segments',
    'cities': 'Villes',
    'users': 'Utilisateurs',
    'roles': 'Rôles & Permissions',
    'calculation_sheets': 'Fiches de calcul',
    'declarations': 'Gérer déclarations',
    'projects': 'Projets',
    'formations': 'Gestion des Formations',
    'corps': 'Corps de Formation',
    'sessions': 'Sessions de Formation',
    'analytics': 'Analytics',
    'student_reports': 'Rapports Étudiants',
    'certificates': 'Certificats',
    'certificate_templates': 'Templates de Certificats',
    'forums': 'Forums',
    'professors': 'Professeurs',
    'validation_workflows': 'Boucles de Validation',
    'schedules': 'Gestion des Horaires',
    'payroll': 'Gestion de la Paie',
    'employee_portal': 'Portail Employé',
    'attendance': 'Temps & Présence',
    'employees': 'Dossiers du Personnel',
    'holidays': 'Jours Fériés',
    'requests_validation': 'Validation des Demandes',
    'leaves': 'Congés',
    'clients': 'Clients',
    'prospects': 'Prospects',
    'devis': 'Devis',
    'contrats': 'Contrats',
}

# Generic wording for an action name, shown next to the per-descriptor label
ACTION_LABELS: Dict[str, str] = {
    'view_page': 'Voir la page',
    'view': 'Voir',
    'view_all': 'Voir tout',
    'create': 'Créer',
    'update': 'Modifier',
    'edit': 'Éditer',
    'delete': 'Supprimer',
    'bulk_delete': 'Suppression en masse',
    'approve': 'Approuver',
    'reject': 'Rejeter',
    'submit': 'Soumettre',
    'validate': 'Valider',
    'publish': 'Publier',
    'duplicate': 'Dupliquer',
    'export': 'Exporter',
    'import': 'Importer',
    'assign': 'Assigner',
    'assign_segments': 'Assigner segments',
    'assign_cities': 'Assigner villes',
    'create_pack': 'Créer un pack',
    'edit_content': 'Éditer contenu',
    'create_folder': 'Créer dossier',
    'edit_canvas': 'Éditer canvas',
    'organize': 'Organiser',
    'download': 'Télécharger',
    'generate': 'Générer',
    'moderate': 'Modérer',
    'manage': 'Gérer',
    'sign': 'Signer',
    'archive': 'Archiver',
    'send': 'Envoyer',
}

# Role name -> codes granted at seed time. '*' grants everything.
ROLE_PRESETS: Dict[str, List[str]] = {
    'Admin': [WILDCARD],
    'Gérant': [
        'accounting.dashboard.view_page',
        'accounting.segments.view_page',
        'accounting.cities.view_page',
        'accounting.declarations.view_page', 'accounting.declarations.view_all',
        'accounting.declarations.create', 'accounting.declarations.fill_data',
        'accounting.declarations.edit_metadata', 'accounting.declarations.submit',
        'training.sessions.view_page', 'training.sessions.create', 'training.sessions.update',
        'training.sessions.add_student', 'training.sessions.edit_student',
        'training.certificates.view_page', 'training.certificates.view',
        'training.certificates.generate', 'training.certificates.download',
        'hr.employee_portal.view_page', 'hr.employee_portal.clock_in_out',
        'hr.employee_portal.submit_requests', 'hr.employee_portal.view_history',
    ],
    'Professeur': [
        'accounting.declarations.view_page', 'accounting.declarations.create',
        'accounting.declarations.fill_data', 'accounting.declarations.submit',
        'training.forums.view_page', 'training.forums.view', 'training.forums.reply',
        'hr.employee_portal.view_page', 'hr.employee_portal.clock_in_out',
        'hr.employee_portal.view_history',
    ],
    'Impression': [
        'training.sessions.view_page',
        'training.certificates.view_page', 'training.certificates.view',
        'training.certificates.generate', 'training.certificates.download',
        'training.certificate_templates.view_page',
    ],
}

# Built-in roles that can be neither renamed nor deleted
SYSTEM_ROLES = tuple(ROLE_PRESETS)
ADMIN_ROLE_NAME = 'Admin'
