"""
Provider registry: ordered, read-only provider descriptors.

Loaded once at process start and injected into the repository. The accepted
document shape is the provider site map used by the frontend config:

    {"api_site": {"<key>": {"name": "<display name>", "api": "<endpoint url>"}}}

A bare ``{"<key>": {...}}`` mapping is accepted too.
"""

import json
import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from sourcing.models import ProviderDescriptor

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Immutable, insertion-ordered mapping of provider key to descriptor."""

    def __init__(self, descriptors: Optional[List[ProviderDescriptor]] = None):
        ordered: Dict[str, ProviderDescriptor] = {}
        for descriptor in descriptors or []:
            if descriptor.key in ordered:
                logger.warning("Duplicate provider key %r in registry, keeping first", descriptor.key)
                continue
            ordered[descriptor.key] = descriptor
        self._descriptors: Mapping[str, ProviderDescriptor] = MappingProxyType(ordered)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "ProviderRegistry":
        sites = mapping.get("api_site", mapping) if isinstance(mapping, Mapping) else {}
        if not isinstance(sites, Mapping):
            logger.warning("Provider config 'api_site' is not a mapping, ignoring it")
            return cls()

        descriptors: List[ProviderDescriptor] = []
        for key, site in sites.items():
            if not isinstance(site, Mapping):
                logger.warning("Skipping provider %r: entry is not a mapping", key)
                continue
            try:
                descriptors.append(
                    ProviderDescriptor(
                        key=str(key),
                        display_name=str(site.get("name") or key),
                        endpoint_template=site.get("api") or "",
                    )
                )
            except PydanticValidationError as e:
                logger.warning("Skipping provider %r: %s", key, e.errors()[0].get("msg"))
        return cls(descriptors)

    def __iter__(self) -> Iterator[ProviderDescriptor]:
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, key: object) -> bool:
        return key in self._descriptors

    def get(self, key: str) -> Optional[ProviderDescriptor]:
        return self._descriptors.get(key)

    def keys(self) -> List[str]:
        return list(self._descriptors.keys())

    def select(self, limit: Optional[int] = None) -> List[ProviderDescriptor]:
        """First ``limit`` descriptors in registry order (all when ``limit`` is None)."""
        descriptors = list(self._descriptors.values())
        if limit is None:
            return descriptors
        return descriptors[: max(limit, 0)]

    @property
    def is_empty(self) -> bool:
        return not self._descriptors


def load_registry(path: Optional[str] = None, raw_json: Optional[str] = None) -> ProviderRegistry:
    """
    Load the provider registry.

    Resolution order: explicit ``raw_json``, explicit ``path``, then the
    PROVIDER_CONFIG_JSON and PROVIDER_CONFIG_PATH environment variables.
    Any read or parse problem yields an empty registry; requests made against
    it are answered with a configuration error.
    """
    raw_json = raw_json if raw_json is not None else os.getenv("PROVIDER_CONFIG_JSON")
    path = path if path is not None else os.getenv("PROVIDER_CONFIG_PATH")

    if raw_json:
        source = "PROVIDER_CONFIG_JSON"
        text = raw_json
    elif path:
        source = path
        try:
            text = Path(path).expanduser().read_text(encoding="utf-8")
        except OSError as e:
            logger.error("Could not read provider config %s: %s", path, e)
            return ProviderRegistry()
    else:
        logger.warning("No provider config set (PROVIDER_CONFIG_PATH / PROVIDER_CONFIG_JSON)")
        return ProviderRegistry()

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error("Provider config %s is not valid JSON: %s", source, e)
        return ProviderRegistry()

    if not isinstance(document, Mapping):
        logger.error("Provider config %s must be a JSON object", source)
        return ProviderRegistry()

    registry = ProviderRegistry.from_mapping(document)
    logger.info(
        "Provider registry loaded",
        extra={"event": "registry_loaded", "config_source": source, "providers": registry.keys()},
    )
    return registry
