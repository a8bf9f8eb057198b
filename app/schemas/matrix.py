from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from app.schemas.permission import PermissionOut


class RequiredPermissionOut(BaseModel):
    action: str
    subject: str


class NavItemOut(BaseModel):
    label: str
    icon: str
    to: str
    order: int = 0
    required_permission: Optional[RequiredPermissionOut] = None


class NavSectionOut(BaseModel):
    title: str
    items: List[NavItemOut]


class MatrixItemOut(BaseModel):
    label: str
    icon: str
    permission_ids: List[int]
    related_permissions: List[PermissionOut]


class MatrixSectionOut(BaseModel):
    title: str
    items: List[MatrixItemOut]
    permission_ids: List[int]


class PermissionMatrixOut(BaseModel):
    sections: List[MatrixSectionOut]
    unmapped_subjects: List[str]

    @classmethod
    def from_matrix(cls, m) -> "PermissionMatrixOut":
        return cls(
            sections=[
                MatrixSectionOut(
                    title=s.title,
                    permission_ids=list(s.permission_ids),
                    items=[
                        MatrixItemOut(
                            label=i.label,
                            icon=i.icon,
                            permission_ids=list(i.permission_ids),
                            related_permissions=[PermissionOut.model_validate(p)
                                                 for p in i.related_permissions],
                        )
                        for i in s.items
                    ],
                )
                for s in m.sections
            ],
            unmapped_subjects=list(m.unmapped_subjects),
        )


def nav_sections_out(sections) -> List[NavSectionOut]:
    return [
        NavSectionOut(
            title=s.title,
            items=[
                NavItemOut(
                    label=i.label,
                    icon=i.icon,
                    to=i.to,
                    order=i.order,
                    required_permission=(
                        RequiredPermissionOut(action=i.required_permission.action,
                                              subject=i.required_permission.subject)
                        if i.required_permission else None),
                )
                for i in s.items
            ],
        )
        for s in sections
    ]
