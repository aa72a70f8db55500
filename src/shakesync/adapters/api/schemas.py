"""Schemas da API - Modelos Pydantic para requests e responses."""

from __future__ import annotations
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ==================== Auth ====================

class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str


class PasswordResetRequest(BaseModel):
    email: str


# ==================== Shakes ====================

class ShakeSubmission(BaseModel):
    count: int = Field(default=1, ge=1)
    timestamp: str


class ShakeItem(BaseModel):
    """Item de ``GET /api/shakes``; campos extras do backend são preservados."""

    model_config = ConfigDict(extra="allow")

    count: Optional[int] = 1


class ShakeListResponse(BaseModel):
    """Formato em objeto de ``GET /api/shakes``."""

    model_config = ConfigDict(extra="allow")

    count: Optional[int] = None
    total: Optional[int] = None
    shakes: Optional[List[ShakeItem]] = None
    data: Optional[List[ShakeItem]] = None

    def items(self) -> List[ShakeItem]:
        return self.shakes if self.shakes is not None else (self.data or [])

    def resolved_count(self) -> int:
        """Contagem explícita (``count``/``total``) ou soma dos itens."""
        if self.count is not None:
            return self.count
        if self.total is not None:
            return self.total
        return sum(item.count if item.count is not None else 1 for item in self.items())


# ==================== Atividades / Feedback ====================

class ActivityRequest(BaseModel):
    type: str
    title: str = ""
    description: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)


class FeedbackRequest(BaseModel):
    message: str
    title: Optional[str] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    category: Optional[str] = None
