# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Read package identifiers from the manifests bundled inside modules."""

from __future__ import annotations

import json
import logging

from pydantic import BaseModel, ConfigDict, ValidationError

from .constants import BOWER_JSON, PACKAGE_JSON

LOGGER = logging.getLogger(__name__)


class PackageManifest(BaseModel):
    """Subset of a package descriptor needed to name an extracted folder."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str | None = None


def read_manifest_id(payload: bytes | str) -> str | None:
    """Return the top-level ``name`` declared by a JSON manifest.

    Args:
        payload: Raw manifest contents.

    Returns:
        str | None: Stripped name, or ``None`` when the document is not a JSON
        object, has no string ``name``, or the name is blank.
    """

    try:
        document = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        LOGGER.debug("manifest is not valid JSON: %s", exc)
        return None
    if not isinstance(document, dict):
        return None
    try:
        manifest = PackageManifest.model_validate(document, strict=True)
    except ValidationError:
        return None
    if manifest.name is None:
        return None
    name = manifest.name.strip()
    return name or None


__all__ = ["BOWER_JSON", "PACKAGE_JSON", "PackageManifest", "read_manifest_id"]
