"""
Endpoint configuration models.

Defines the declarative description of one proxied operation as Pydantic models.
Field aliases follow the camelCase keys used in endpoints.yml.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

HttpMethod = Literal["GET", "POST", "PUT", "DELETE"]
ResponseType = Literal["json", "binary", "text"]


class _ConfigModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


def _scalar_map(value):
    """Read a YAML mapping of templates, keeping scalar literals as strings."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        return value
    result = {}
    for key, item in value.items():
        if item is None:
            item = ""
        elif isinstance(item, bool):
            item = "true" if item else "false"
        elif isinstance(item, (int, float)):
            item = str(item)
        result[key] = item
    return result


class UpstreamConfig(_ConfigModel):
    """Upstream call description (``opentext`` block)."""

    path_template: str = Field(alias="path")
    method: HttpMethod = "GET"
    requires_auth: bool = Field(default=False, alias="requiresAuth")

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value):
        if isinstance(value, str):
            return value.upper()
        return value


class MappingConfig(_ConfigModel):
    """Request mapping: extraction paths and templates."""

    input: Dict[str, str] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)
    path_params: Dict[str, str] = Field(default_factory=dict, alias="pathParams")
    query_params: Dict[str, str] = Field(default_factory=dict, alias="queryParams")
    headers: Dict[str, str] = Field(default_factory=dict)

    @field_validator("input", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return value or {}

    @field_validator("path_params", "query_params", "headers", mode="before")
    @classmethod
    def _template_map(cls, value):
        return _scalar_map(value)

    @field_validator("required", mode="before")
    @classmethod
    def _none_as_empty_list(cls, value):
        return value or []


class ResponseConfig(_ConfigModel):
    """Response shaping."""

    type: ResponseType = "text"
    encoding: Optional[Literal["base64"]] = None
    include_metadata: bool = Field(default=False, alias="includeMetadata")
    transform: Dict[str, str] = Field(default_factory=dict)
    expect_fields: List[str] = Field(default_factory=list, alias="expectFields")

    @field_validator("type", "encoding", mode="before")
    @classmethod
    def _lower(cls, value):
        if isinstance(value, str):
            return value.lower()
        return value

    @field_validator("transform", mode="before")
    @classmethod
    def _literal_map(cls, value):
        return _scalar_map(value)


class EndpointConfig(_ConfigModel):
    """
    Core configuration entity for one endpoint.

    Immutable once loaded; the registry shares instances across requests.
    """

    name: str = Field(min_length=1)
    upstream: UpstreamConfig = Field(alias="opentext")
    mapping: MappingConfig = Field(default_factory=MappingConfig)
    response: Optional[ResponseConfig] = None

    @field_validator("mapping", mode="before")
    @classmethod
    def _none_as_default(cls, value):
        return value if value is not None else {}
