"""Layout cache models."""

from __future__ import annotations

from typing import Dict, NamedTuple, Optional

from pydantic import BaseModel, Field

from .graph import GroupMode

ALL_SCOPES = "all"


class Position(NamedTuple):
    x: float
    y: float


class LayoutKey(NamedTuple):
    """Cache namespace: a different scope or grouping mode is a different key."""

    project_id: str
    scope_root: Optional[str]
    group_mode: GroupMode

    @property
    def namespace(self) -> str:
        scope = self.scope_root or ALL_SCOPES
        return f"layout:{self.project_id}:{scope}:{GroupMode(self.group_mode).value}"


class LayoutTick(BaseModel):
    """Position update reported by the layout oracle."""

    alpha: float = Field(..., ge=0.0, description="Oracle energy; converged below the threshold")
    positions: Dict[str, Position] = Field(default_factory=dict)


class LayoutSnapshot(BaseModel):
    namespace: str
    positions: Dict[str, Position]
    saved: bool = False


__all__ = ["ALL_SCOPES", "Position", "LayoutKey", "LayoutTick", "LayoutSnapshot"]
