# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Custom exceptions raised by lookup, enumeration, and extraction operations."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


class AssetLocatorError(ValueError):
    """Base class for client-facing lookup failures."""


class NotFoundError(AssetLocatorError):
    """Raised when a path or module does not correspond to any indexed resource."""

    def __init__(self, path: str, *, module: str | None = None, subject: str | None = None) -> None:
        """Create the error for the queried ``path``.

        Args:
            path: Partial or exact path supplied by the caller.
            module: Module the lookup was scoped to, when any.
            subject: Text naming what could not be found; defaults to ``path``.
        """

        super().__init__(
            f"{subject or path} could not be found. "
            "Make sure you've added the corresponding module and please check for typos."
        )
        self.path = path
        self.module = module

    @classmethod
    def for_module(cls, module: str, path: str | None = None) -> NotFoundError:
        """Return an error describing an unknown ``module``.

        Args:
            module: Module name that is not present in the registry.
            path: Path that was queried within the module, when any.

        Returns:
            NotFoundError: Error whose message names the missing module.
        """

        return cls(path if path is not None else module, module=module, subject=f"Module {module}")


class MultipleMatchesError(AssetLocatorError):
    """Raised when a partial path matches more than one indexed resource."""

    def __init__(self, path: str, matches: Iterable[str]) -> None:
        """Create the error carrying every ambiguous candidate.

        Args:
            path: Partial path supplied by the caller.
            matches: Full paths matching ``path``.
        """

        super().__init__(
            f"Multiple matches found for {path}. "
            "Please provide a more specific path, for example by including a version number."
        )
        self.path = path
        self.matches: tuple[str, ...] = tuple(matches)


class EnumerationError(RuntimeError):
    """Raised when a resource origin cannot be opened or walked."""


class UnsafePathError(AssetLocatorError):
    """Raised when a destination key would resolve outside its output directory."""

    def __init__(self, key: str) -> None:
        super().__init__(f"{key!r} does not stay inside the output directory")
        self.key = key


class ExtractionError(RuntimeError):
    """Raised when a resource cannot be copied to its destination."""

    def __init__(self, source: str, destination: Path, reason: str) -> None:
        """Create the error describing the failing ``source``/``destination`` pair.

        Args:
            source: Identity of the resource being copied.
            destination: Filesystem path that could not be written.
            reason: Human-readable description of the underlying failure.
        """

        super().__init__(f"Could not extract {source} to {destination}: {reason}")
        self.source = source
        self.destination = destination
        self.reason = reason


__all__ = (
    "AssetLocatorError",
    "EnumerationError",
    "ExtractionError",
    "MultipleMatchesError",
    "NotFoundError",
    "UnsafePathError",
)
