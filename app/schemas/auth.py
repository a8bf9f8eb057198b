# app/schemas/auth.py
from pydantic import BaseModel
from typing import List


class LoginIn(BaseModel):
    email: str
    password: str


class TokenOut(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class MeOut(BaseModel):
    id: int
    name: str
    email: str
    is_admin: bool = False
    roles: List[str] = []
    permissions: List[str] = []
