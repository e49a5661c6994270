"""Locate and load service model documents.

Models live in ``<root>/<service>/<api-version>/service-2.json``. The
bundled ``cloudwire/data`` directory is always searched last, so a
user-supplied directory can shadow a bundled model.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Iterable

from cloudwire.core.errors import ServiceModelError, UnknownServiceError

from .shapes import ServiceModel

logger = logging.getLogger(__name__)

MODEL_FILENAME = "service-2.json"


def _bundled_root() -> Path:
    return Path(str(resources.files("cloudwire") / "data"))


def _roots(search_paths: Iterable[str | Path] | None) -> list[Path]:
    roots = [Path(p).expanduser() for p in (search_paths or [])]
    roots.append(_bundled_root())
    return [r for r in roots if r.is_dir()]


def list_available_services(search_paths: Iterable[str | Path] | None = None) -> list[str]:
    """Service names with at least one model file on the search path."""
    names: set[str] = set()
    for root in _roots(search_paths):
        for service_dir in root.iterdir():
            if service_dir.is_dir() and any(service_dir.glob(f"*/{MODEL_FILENAME}")):
                names.add(service_dir.name)
    return sorted(names)


def list_api_versions(
    service_name: str, search_paths: Iterable[str | Path] | None = None
) -> list[str]:
    versions: set[str] = set()
    for root in _roots(search_paths):
        for model_file in (root / service_name).glob(f"*/{MODEL_FILENAME}"):
            versions.add(model_file.parent.name)
    return sorted(versions)


def _find_model_file(
    service_name: str, api_version: str | None, search_paths: Iterable[str | Path] | None
) -> Path:
    roots = _roots(search_paths)
    if api_version is None:
        versions = list_api_versions(service_name, search_paths)
        if not versions:
            raise UnknownServiceError(service_name, list_available_services(search_paths))
        # ISO dates sort lexically; newest wins
        api_version = versions[-1]

    for root in roots:
        candidate = root / service_name / api_version / MODEL_FILENAME
        if candidate.is_file():
            return candidate
    raise UnknownServiceError(
        f"{service_name}@{api_version}", list_available_services(search_paths)
    )


def load_model_file(path: str | Path, service_name: str | None = None) -> ServiceModel:
    """Load a model document from an explicit path."""
    path = Path(path)
    try:
        doc = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ServiceModelError(f"{path}: not valid JSON ({exc})") from exc
    model = ServiceModel.from_dict(doc, service_name=service_name)
    logger.debug(
        "Loaded service model %s %s (%d operations) from %s",
        model.service_name, model.metadata.api_version, len(model.operations), path,
    )
    return model


@lru_cache(maxsize=64)
def _load_cached(service_name: str, api_version: str | None, paths: tuple[str, ...]) -> ServiceModel:
    path = _find_model_file(service_name, api_version, paths)
    return load_model_file(path, service_name=service_name)


def load_service_model(
    service_name: str,
    api_version: str | None = None,
    search_paths: Iterable[str | Path] | None = None,
) -> ServiceModel:
    """Load (and cache) the model for ``service_name``.

    Args:
        service_name: Directory name, e.g. ``"ssm"`` or ``"ec2"``.
        api_version: Specific API version; newest available when omitted.
        search_paths: Extra model roots searched before the bundled data.
    """
    paths = tuple(str(p) for p in (search_paths or ()))
    return _load_cached(service_name, api_version, paths)
