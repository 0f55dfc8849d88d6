"""Pydantic schemas for the login / refresh token pair."""

from __future__ import annotations

from pydantic import BaseModel


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    # Lets the client pick the member, trainer or admin view without a second call
    user_id: int
    role: str
    branch_id: str | None = None


class RefreshRequest(BaseModel):
    refresh_token: str
