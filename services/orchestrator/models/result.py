"""
Orchestration result models.

Standardizes the output of the orchestration pipeline.
"""

from typing import Optional

from pydantic import BaseModel


class OrchestrationResult(BaseModel):
    """
    Unified result of one orchestration run.

    Used to decouple the internal pipeline from FastAPI Response objects.
    Body and status are produced together as the last pipeline action.
    """

    success: bool
    status_code: int
    payload: bytes = b""
    media_type: str = "application/json"
    error_kind: Optional[str] = None
    error: Optional[str] = None
