# app/navigation/route_data.py
"""
Declared route tree of the intranet.

Data only (no handlers), shared by:
  - the nav generator (sidebar sections)
  - the permission sync (which (action, subject) rows must exist)
  - the permission matrix on the roles screen

Node keys:
  path, title, index, redirect_to
  nav          -> {"section", "label", "icon", "order"}; node shows in sidebar
  permission   -> {"action", "subject"}; required to open the route
  hide_from_nav
  children     -> list of nodes
"""
from __future__ import annotations

from typing import Any, Dict, List

RouteNode = Dict[str, Any]

SECTION_ORDER: List[str] = ["Calendario", "Finanzas", "Servicios", "Operaciones", "Sistema"]

CRUD_ACTIONS: List[str] = ["read", "create", "update", "delete"]


def _nav(icon: str, label: str, order: int, section: str) -> Dict[str, Any]:
    return {"icon": icon, "label": label, "order": order, "section": section}


def _perm(action: str, subject: str) -> Dict[str, str]:
    return {"action": action, "subject": subject}


ROUTE_DATA: List[RouteNode] = [
    # -------- Home / dashboard --------
    {
        "path": "",
        "title": "Inicio",
        "nav": _nav("Home", "Inicio", 0, "Calendario"),
        "permission": _perm("read", "Dashboard"),
    },
    # -------- Calendario --------
    {
        "path": "calendar",
        "title": "Calendario",
        "children": [
            {"index": True, "redirect_to": "/calendar/schedule"},
            {
                "path": "schedule",
                "title": "Calendario interactivo",
                "nav": _nav("CalendarDays", "Calendario", 1, "Calendario"),
                "permission": _perm("read", "CalendarSchedule"),
            },
            {
                "path": "daily",
                "title": "Detalle diario",
                "nav": _nav("Calendar", "Detalle Diario", 2, "Calendario"),
                "permission": _perm("read", "CalendarDaily"),
            },
            {
                "path": "heatmap",
                "title": "Mapa de calor",
                "nav": _nav("LayoutDashboard", "Mapa de Calor", 3, "Calendario"),
                "permission": _perm("read", "CalendarHeatmap"),
            },
            {
                "path": "classify",
                "title": "Clasificar eventos",
                "nav": _nav("ListChecks", "Clasificar", 4, "Calendario"),
                "permission": _perm("update", "CalendarEvent"),
            },
            {
                "path": "sync-history",
                "title": "Historial de sincronización",
                "nav": _nav("Clock", "Historial Sync", 5, "Calendario"),
                "permission": _perm("read", "CalendarSyncLog"),
            },
        ],
    },
    # -------- Finanzas --------
    {
        "path": "finanzas",
        "title": "Finanzas",
        "children": [
            {"index": True, "redirect_to": "/finanzas/conciliaciones"},
            {
                "path": "conciliaciones",
                "title": "Conciliaciones (MP)",
                "nav": _nav("ListChecks", "Conciliaciones", 2, "Finanzas"),
                "permission": _perm("read", "Integration"),
            },
            {
                "path": "liberaciones",
                "title": "Liberaciones (MP)",
                "nav": _nav("Wallet", "Liberaciones", 3, "Finanzas"),
                "permission": _perm("read", "Integration"),
            },
            {
                "path": "statistics",
                "title": "Estadísticas financieras",
                "nav": _nav("BarChart3", "Estadísticas", 2, "Finanzas"),
                "permission": _perm("read", "TransactionStats"),
            },
            {
                "path": "counterparts",
                "title": "Contrapartes",
                "nav": _nav("Users2", "Contrapartes", 4, "Finanzas"),
                "permission": _perm("read", "Counterpart"),
            },
            {
                "path": "participants",
                "title": "Participantes",
                "nav": _nav("Users2", "Participantes", 5, "Finanzas"),
                "permission": _perm("read", "Person"),
            },
            {
                "path": "production-balances",
                "title": "Balances de producción diaria",
                "nav": _nav("FileSpreadsheet", "Balance Diario", 6, "Finanzas"),
                "permission": _perm("read", "ProductionBalance"),
            },
            {
                "path": "loans",
                "title": "Préstamos y créditos",
                "nav": _nav("PiggyBank", "Préstamos", 7, "Finanzas"),
                "permission": _perm("read", "Loan"),
            },
        ],
    },
    # -------- Servicios --------
    {
        "path": "patients",
        "title": "Pacientes",
        "nav": _nav("Users", "Pacientes", 0, "Servicios"),
        "permission": _perm("read", "Patient"),
        "children": [
            {
                "path": "new",
                "title": "Nuevo paciente",
                "permission": _perm("create", "Patient"),
                "hide_from_nav": True,
            },
            {
                "path": ":id",
                "title": "Ficha del paciente",
                "permission": _perm("read", "Patient"),
                "hide_from_nav": True,
                "children": [
                    {
                        "path": "new-consultation",
                        "title": "Nueva consulta",
                        "permission": _perm("create", "Consultation"),
                        "hide_from_nav": True,
                    },
                    {
                        "path": "new-budget",
                        "title": "Nuevo presupuesto",
                        "permission": _perm("create", "Budget"),
                        "hide_from_nav": True,
                    },
                ],
            },
        ],
    },
    {
        "path": "services",
        "title": "Servicios",
        "children": [
            {
                "index": True,
                "title": "Servicios recurrentes",
                "nav": _nav("Briefcase", "Servicios", 1, "Servicios"),
                "permission": _perm("read", "ServiceList"),
            },
            {
                "path": "agenda",
                "title": "Agenda de servicios",
                "nav": _nav("CalendarDays", "Agenda", 2, "Servicios"),
                "permission": _perm("read", "ServiceAgenda"),
            },
            {
                "path": "create",
                "title": "Crear servicio",
                "permission": _perm("create", "Service"),
            },
            {
                "path": ":id/edit",
                "title": "Editar servicio",
                "permission": _perm("update", "Service"),
            },
            {
                "path": "templates",
                "title": "Plantillas de servicios",
                "permission": _perm("read", "ServiceTemplate"),
            },
        ],
    },
    # -------- Operaciones --------
    {
        "path": "operations",
        "title": "Operaciones",
        "children": [
            {"index": True, "redirect_to": "/operations/inventory"},
            {
                "path": "inventory",
                "title": "Gestión de Inventario",
                "nav": _nav("Box", "Inventario", 1, "Operaciones"),
                "permission": _perm("read", "InventoryItem"),
            },
            {
                "path": "supplies",
                "title": "Solicitud de Insumos",
                "nav": _nav("PackagePlus", "Solicitudes", 2, "Operaciones"),
                "permission": _perm("read", "SupplyRequest"),
            },
        ],
    },
    {
        "path": "hr",
        "title": "RRHH",
        "children": [
            {"index": True, "redirect_to": "/hr/employees"},
            {
                "path": "employees",
                "title": "Trabajadores",
                "nav": _nav("Users2", "RRHH", 3, "Operaciones"),
                "permission": _perm("read", "Employee"),
            },
            {
                "path": "timesheets",
                "title": "Horas y pagos",
                "nav": _nav("Clock", "Control Horas", 4, "Operaciones"),
                "permission": _perm("read", "TimesheetList"),
            },
            {
                "path": "audit",
                "title": "Auditoría de horarios",
                "nav": _nav("ClipboardCheck", "Auditoría", 5, "Operaciones"),
                "permission": _perm("read", "TimesheetAudit"),
            },
            {
                "path": "reports",
                "title": "Reportes y estadísticas",
                "nav": _nav("BarChart3", "Análisis", 6, "Operaciones"),
                "permission": _perm("read", "Report"),
            },
        ],
    },
    {
        "path": "certificates/medical",
        "title": "Generar Certificado Médico",
        "nav": _nav("FileText", "Certificados Médicos", 7, "Operaciones"),
        "permission": _perm("create", "MedicalCertificate"),
    },
    # -------- Sistema --------
    {
        "path": "settings",
        "title": "Configuración",
        "children": [
            {"index": True, "redirect_to": "/settings/roles"},
            {
                "path": "roles",
                "title": "Roles y permisos",
                "nav": _nav("Users2", "Roles y Permisos", 1, "Sistema"),
                "permission": _perm("read", "Role"),
            },
            {
                "path": "users",
                "title": "Gestión de usuarios",
                "nav": _nav("UserCog", "Usuarios", 2, "Sistema"),
                "permission": _perm("read", "User"),
            },
            {
                "path": "users/add",
                "title": "Agregar usuario",
                "permission": _perm("create", "User"),
            },
            {
                "path": "people",
                "title": "Gestión de personas",
                "nav": _nav("Users", "Personas", 3, "Sistema"),
                "permission": _perm("read", "Person"),
            },
            {
                "path": "people/:id",
                "title": "Detalles de persona",
                "permission": _perm("read", "Person"),
            },
            {
                "path": "calendar",
                "title": "Accesos y conexiones",
                "nav": _nav("Calendar", "Cfg. Calendario", 4, "Sistema"),
                "permission": _perm("update", "CalendarSetting"),
            },
            {
                "path": "inventario",
                "title": "Parámetros de inventario",
                "nav": _nav("PackagePlus", "Cfg. Inventario", 5, "Sistema"),
                "permission": _perm("update", "InventorySetting"),
            },
            {
                "path": "mercadopago",
                "title": "Reportes Mercado Pago",
                "nav": _nav("CreditCard", "Mercado Pago", 6, "Sistema"),
                "permission": _perm("read", "Integration"),
            },
            {
                "path": "csv-upload",
                "title": "Carga masiva de datos",
                "nav": _nav("Upload", "Carga masiva", 7, "Sistema"),
                "permission": _perm("create", "BulkData"),
            },
            {
                "path": "backups",
                "title": "Backups de base de datos",
                "nav": _nav("Database", "Backups", 8, "Sistema"),
                "permission": _perm("read", "Backup"),
            },
            {
                "path": "access",
                "title": "Control de acceso y MFA",
                "nav": _nav("ShieldCheck", "Control Acceso", 9, "Sistema"),
                "permission": _perm("update", "User"),
            },
            {
                "path": "sync-history",
                "title": "Historial de Sincronización",
                "nav": _nav("History", "Historial Sync", 10, "Sistema"),
                "permission": _perm("read", "SyncLog"),
            },
        ],
    },
    # -------- No permission required --------
    {"path": "account", "title": "Mi Cuenta"},
    {"path": "onboarding", "title": "Configuración inicial"},
]

# Permissions for API endpoints without a UI page; synced with the route ones.
API_PERMISSIONS: List[Dict[str, str]] = [
    _perm("read", "Permission"),
    _perm("update", "Permission"),
]

# Subjects the backend knows how to guard (checked by scripts/validate_permissions.py)
BACKEND_SUBJECTS: List[str] = [
    "User", "Transaction", "Setting", "Role", "Permission", "Person",
    "Counterpart", "Loan", "Service", "InventoryItem", "ProductionBalance",
    "CalendarEvent", "Employee", "Timesheet", "Report", "SupplyRequest",
    "Dashboard", "Backup", "BulkData", "DailyBalance", "CalendarSetting",
    "InventorySetting", "Integration", "CalendarSchedule", "CalendarDaily",
    "CalendarHeatmap", "CalendarSyncLog", "TransactionList", "TransactionStats",
    "TransactionCSV", "ServiceList", "ServiceAgenda", "ServiceTemplate",
    "TimesheetList", "TimesheetAudit", "SyncLog", "ReleaseTransaction",
    "Patient", "Consultation", "Budget", "MedicalCertificate",
]
