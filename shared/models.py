"""
Shared Pydantic models for all layers.
All contexts are immutable (frozen) after creation.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


# ─── Invocation Boundary ───────────────────────────────────────

class InvocationRequest(BaseModel):
    """Decoded tool call from any transport adapter."""
    model_config = {"frozen": True}

    tool: str = Field(..., description="Tool name, e.g. 'gini_coefficient'")
    arguments: Any = Field(default_factory=dict, description="Loosely-typed argument bag; must be a JSON object")


class ErrorPayload(BaseModel):
    """Tagged failure: kind + sanitized message."""
    model_config = {"frozen": True}

    kind: str = Field(..., description="'unknown_tool', 'invalid_argument', 'arithmetic_domain_error' or 'retriever_error'")
    message: str


# ─── Response Envelope ─────────────────────────────────────────

class ToolResponse(BaseModel):
    """Standardized output of every tool invocation."""
    model_config = {"frozen": True}

    status: Literal["success", "failure"]
    tool: str
    result: dict[str, Any] = Field(default_factory=dict)
    error: ErrorPayload | None = None
    explanation: str = Field(default="")
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "success"


# ─── Tool Catalogue ────────────────────────────────────────────

class ToolDescriptor(BaseModel):
    """Discovery record surfaced by transports (tool listing)."""
    model_config = {"frozen": True}

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)
