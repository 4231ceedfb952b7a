"""
Endpoint registry.

Loads endpoints.yml and provides name-to-config mapping.
The registry is built once at startup and is read-only afterwards.
"""

import logging
import os
import string
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Optional

import yaml
from pydantic import ValidationError

from ..core.exceptions import EndpointConfigError, UnknownEndpointError
from ..models.endpoint import EndpointConfig

logger = logging.getLogger("orchestrator.endpoint_registry")

CATEGORIES_ENDPOINT = "categories"
DOWNLOAD_ENDPOINT = "download"


def builtin_endpoints() -> List[EndpointConfig]:
    """
    Endpoints served by the fixed orchestration routes.

    - categories: auth, then GET the categories of a node
    - download: auth, then GET the node content as a base64 envelope
    """
    return [
        EndpointConfig.model_validate(
            {
                "name": CATEGORIES_ENDPOINT,
                "opentext": {
                    "path": "/v2/nodes/{id}/categories",
                    "method": "GET",
                    "requiresAuth": True,
                },
                "mapping": {
                    "input": {
                        "id": "$.id",
                        "metadata": "$.metadata",
                        "supper_response_codes": "$.supper_response_codes",
                    },
                    "required": ["id"],
                    "queryParams": {
                        "metadata": "{metadata}",
                        "supper_response_codes": "{supper_response_codes}",
                    },
                    "headers": {"Accept": "application/json"},
                },
                "response": {"type": "json", "expectFields": ["links", "results"]},
            }
        ),
        EndpointConfig.model_validate(
            {
                "name": DOWNLOAD_ENDPOINT,
                "opentext": {
                    "path": "/v2/nodes/{id}/content",
                    "method": "GET",
                    "requiresAuth": True,
                },
                "mapping": {
                    "input": {"id": "$.id"},
                    "required": ["id"],
                    "headers": {"Accept": "*/*"},
                },
                "response": {"type": "binary", "encoding": "base64", "includeMetadata": True},
            }
        ),
    ]


def load_endpoints_config(config_path: str) -> List[EndpointConfig]:
    """
    Load and validate endpoints.yml.

    ${VAR} placeholders are substituted from the environment before parsing.

    Raises:
        EndpointConfigError: file missing, unparsable or schema violation
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            template = string.Template(f.read())
            content = template.safe_substitute(os.environ.copy())
            cfg = yaml.safe_load(content) or {}
    except FileNotFoundError as e:
        raise EndpointConfigError(f"Endpoints config not found at {config_path}") from e
    except yaml.YAMLError as e:
        raise EndpointConfigError(f"Error parsing endpoints config: {e}") from e

    if not isinstance(cfg, dict):
        raise EndpointConfigError(f"Endpoints config must be a mapping: {config_path}")

    raw_endpoints = cfg.get("endpoints") or []
    if not isinstance(raw_endpoints, list):
        raise EndpointConfigError("'endpoints' must be a list")

    endpoints: List[EndpointConfig] = []
    for index, entry in enumerate(raw_endpoints):
        try:
            endpoints.append(EndpointConfig.model_validate(entry))
        except ValidationError as e:
            name = entry.get("name") if isinstance(entry, dict) else None
            raise EndpointConfigError(
                f"Invalid endpoint entry #{index} ({name or 'unnamed'}): {e}"
            ) from e

    logger.info(f"Loaded {len(endpoints)} endpoints from {config_path}")
    return endpoints


class EndpointRegistry:
    def __init__(self, endpoints: Iterable[EndpointConfig]):
        """
        Args:
            endpoints: parsed endpoint configurations

        Raises:
            EndpointConfigError: duplicate endpoint name
        """
        registry: Dict[str, EndpointConfig] = {}
        for endpoint in endpoints:
            if endpoint.name in registry:
                raise EndpointConfigError(f"Duplicate endpoint name: {endpoint.name}")
            registry[endpoint.name] = endpoint
            logger.debug(f"Registered endpoint configuration: {endpoint.name}")

        self._registry = MappingProxyType(registry)

    @classmethod
    def from_file(cls, config_path: str, include_builtins: bool = True) -> "EndpointRegistry":
        endpoints: List[EndpointConfig] = builtin_endpoints() if include_builtins else []
        endpoints.extend(load_endpoints_config(config_path))
        registry = cls(endpoints)
        logger.info(f"Endpoint registry ready with {len(registry)} endpoints")
        return registry

    def lookup(self, name: Optional[str]) -> EndpointConfig:
        """
        Get configuration by endpoint name.

        Raises:
            UnknownEndpointError: name is empty or not registered
        """
        if not name or name not in self._registry:
            raise UnknownEndpointError(name or "")
        return self._registry[name]

    def names(self) -> List[str]:
        return sorted(self._registry)

    def __contains__(self, name: Any) -> bool:
        return name in self._registry

    def __len__(self) -> int:
        return len(self._registry)
