from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class SignInRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)

    model_config = {
        "json_schema_extra": {"example": {"email": "joao@cliente.com", "password": "123456"}}
    }


class SignUpRequest(BaseModel):
    email: str
    password: str
    full_name: str
    phone: str


class SignUpResponse(BaseModel):
    success: bool = True
    needs_approval: bool


class PasswordResetRequest(BaseModel):
    email: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int

    model_config = {
        "json_schema_extra": {
            "example": {
                "access_token": "<jwt>",
                "refresh_token": "<jwt>",
                "token_type": "bearer",
                "expires_in": 900,
            }
        }
    }


class RefreshRequest(BaseModel):
    refresh_token: str


class MessageResponse(BaseModel):
    message: str
    detail: Optional[str] = None
