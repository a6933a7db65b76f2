# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Group indexed resource paths into modules and infer their versions."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .constants import PATH_SEPARATOR
from .index import PathIndex

if TYPE_CHECKING:
    from .versions import MetadataSource


@dataclass(frozen=True, slots=True)
class ModuleInfo:
    """Describe one module discovered under the namespace root.

    Attributes:
        name: Module directory name directly beneath the namespace root.
        version: Version segment shared by every path of the module, or
            ``None`` for flat modules.
        origin: Origin token of the source that provided the module, when known.
        contents: Full paths belonging to the module.
        group: Group tag of the module's declared-version record, when present.
    """

    name: str
    version: str | None
    origin: str | None = None
    contents: frozenset[str] = field(default_factory=frozenset)
    group: str | None = None


def module_name_of(path: str, root: str) -> str | None:
    """Return the module owning ``path`` or ``None`` for paths outside modules.

    Args:
        path: Full resource path.
        root: Namespace root without surrounding separators.

    Returns:
        str | None: Module segment of ``path``; ``None`` when ``path`` is not
        under ``root`` or sits directly beneath it.
    """

    prefix = f"{root}{PATH_SEPARATOR}"
    if not path.startswith(prefix):
        return None
    module, separator, _ = path[len(prefix) :].partition(PATH_SEPARATOR)
    if not module or not separator:
        return None
    return module


def split_module_path(path: str, root: str) -> tuple[str, str] | None:
    """Return the ``(module, version_segment)`` pair encoded in ``path``.

    Args:
        path: Full path shaped ``<root>/<module>/<segment>/<rest>``.
        root: Namespace root without surrounding separators.

    Returns:
        tuple[str, str] | None: Module and the segment following it, or
        ``None`` when ``path`` does not have that shape.
    """

    prefix = f"{root}{PATH_SEPARATOR}"
    if not path.startswith(prefix):
        return None
    parts = path[len(prefix) :].split(PATH_SEPARATOR, 2)
    if len(parts) < 3 or not all(parts):
        return None
    return parts[0], parts[1]


def module_prefix(root: str, module: str) -> str:
    """Return the path prefix shared by every resource of ``module``."""

    return f"{root}{PATH_SEPARATOR}{module}{PATH_SEPARATOR}"


def compose_module_path(root: str, module: str, version: str | None, relative: str) -> str:
    """Return the full path of ``relative`` inside ``module``.

    The version segment is inserted unless ``relative`` already starts with it.

    Args:
        root: Namespace root without surrounding separators.
        module: Module name.
        version: Module version, or ``None`` for flat modules.
        relative: Path relative to the module (and optionally its version).

    Returns:
        str: Candidate full path.
    """

    relative = relative.lstrip(PATH_SEPARATOR)
    if version is None or relative.startswith(f"{version}{PATH_SEPARATOR}"):
        return f"{module_prefix(root, module)}{relative}"
    return f"{module_prefix(root, module)}{version}{PATH_SEPARATOR}{relative}"


def infer_version(module: str, paths: Iterable[str], root: str) -> str | None:
    """Return the version segment shared by every path of ``module``.

    The segment after the module name of the first path is the version only if
    every other path of the module lives beneath that same segment.

    Args:
        module: Module name.
        paths: Full paths belonging to ``module``.
        root: Namespace root without surrounding separators.

    Returns:
        str | None: Inferred version, or ``None`` for empty or flat modules.
    """

    ordered = sorted(paths)
    if not ordered:
        return None
    split = split_module_path(ordered[0], root)
    if split is None or split[0] != module:
        return None
    version_prefix = f"{module_prefix(root, module)}{split[1]}{PATH_SEPARATOR}"
    if all(path.startswith(version_prefix) for path in ordered):
        return split[1]
    return None


class ModuleRegistry(Mapping[str, ModuleInfo]):
    """Read-only mapping of module name to :class:`ModuleInfo`."""

    def __init__(self, modules: Mapping[str, ModuleInfo], root: str) -> None:
        self._modules = dict(modules)
        self._root = root

    @classmethod
    def build(
        cls,
        index: PathIndex,
        root: str,
        origins: Mapping[str, str] | None = None,
        metadata: MetadataSource | None = None,
    ) -> ModuleRegistry:
        """Partition ``index`` by module and describe every module found.

        Args:
            index: Index over every discovered resource path.
            root: Namespace root without surrounding separators.
            origins: Optional mapping of path to the origin token providing it.
            metadata: Optional source of declared-version records used to tag
                modules with their group.

        Returns:
            ModuleRegistry: Registry holding one entry per module.
        """

        partitions: dict[str, list[str]] = defaultdict(list)
        for path in index.with_prefix(f"{root}{PATH_SEPARATOR}"):
            module = module_name_of(path, root)
            if module is not None:
                partitions[module].append(path)

        modules: dict[str, ModuleInfo] = {}
        for name, paths in partitions.items():
            origin = origins.get(paths[0]) if origins is not None else None
            declared = metadata.declared_version(name) if metadata is not None else None
            modules[name] = ModuleInfo(
                name=name,
                version=infer_version(name, paths, root),
                origin=origin,
                contents=frozenset(paths),
                group=declared.group if declared is not None else None,
            )
        return cls(modules, root)

    @property
    def root(self) -> str:
        """Return the namespace root the registry was built for."""

        return self._root

    def versions(self) -> dict[str, str | None]:
        """Return the mapping of module name to inferred version."""

        return {name: info.version for name, info in sorted(self._modules.items())}

    def owner_of(self, path: str) -> ModuleInfo | None:
        """Return the module containing ``path``.

        Args:
            path: Full resource path.

        Returns:
            ModuleInfo | None: Owning module, or ``None`` when ``path`` is not
            part of any module.
        """

        name = module_name_of(path, self._root)
        if name is None:
            return None
        info = self._modules.get(name)
        if info is None or path not in info.contents:
            return None
        return info

    def __getitem__(self, name: str) -> ModuleInfo:
        return self._modules[name]

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._modules))

    def __len__(self) -> int:
        return len(self._modules)


__all__ = [
    "ModuleInfo",
    "ModuleRegistry",
    "compose_module_path",
    "infer_version",
    "module_name_of",
    "module_prefix",
    "split_module_path",
]
