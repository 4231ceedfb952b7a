"""
Upstream request model.

Output of the Request Builder, input of the Dispatch step.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field


class UpstreamRequest(BaseModel):
    """Fully resolved upstream call."""

    method: str
    url: str
    headers: Dict[str, str] = Field(default_factory=dict)
    query_string: str = ""
    body: Optional[bytes] = None
