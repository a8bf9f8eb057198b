from __future__ import annotations

from typing import Iterable, List

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from app.services.permission_matrix import PermissionMatrix

CHECK = "✓"


def build_permission_matrix_excel(fp, matrix: PermissionMatrix, roles: Iterable) -> None:
    """
    One row per permission, grouped by section / page, one column per role.
    `roles` need .name and .permission_ids.
    """
    roles = list(roles)
    wb = Workbook()
    ws = wb.active
    ws.title = "Permisos"

    headers: List[str] = ["Sección", "Página", "Acción", "Recurso", "Descripción"]
    headers += [r.name for r in roles]
    ws.append(headers)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    granted = [set(r.permission_ids) for r in roles]

    for section in matrix.sections:
        for item in section.items:
            for p in item.related_permissions:
                ws.append([
                    section.title,
                    item.label,
                    getattr(p, "action", ""),
                    getattr(p, "subject", ""),
                    getattr(p, "description", None),
                ] + [CHECK if p.id in ids else None for ids in granted])

    for col in range(1, len(headers) + 1):
        ws.column_dimensions[get_column_letter(col)].width = 24 if col <= 5 else 16
    ws.freeze_panes = "F2"

    if matrix.unmapped_subjects:
        ws2 = wb.create_sheet("Sin ruta")
        ws2.append(["Subject"])
        for s in matrix.unmapped_subjects:
            ws2.append([s])
        ws2.column_dimensions["A"].width = 32

    wb.save(fp)
