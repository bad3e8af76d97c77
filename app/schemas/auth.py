# app/schemas/auth.py
from pydantic import BaseModel
from typing import Optional


class TokenData(BaseModel):
    """Claims of a till access token; client_id and branch_id define the tenant"""
    user_id: str
    client_id: str
    branch_id: str
    device_id: Optional[str] = None
