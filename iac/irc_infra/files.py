"""Enumerate the built client files that get uploaded to the site bucket."""
from __future__ import annotations

import mimetypes
import os
from dataclasses import dataclass
from typing import Dict, List

import pulumi

from .errors import ObjectKeyCollisionError

__all__ = ["SiteObject", "walk_files", "object_key", "collect_site_objects"]

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class SiteObject:
    """One local file and the bucket key it is published under."""

    key: str
    path: str
    content_type: str


def walk_files(root: str) -> List[str]:
    """Return absolute paths of every regular file below ``root``.

    Symbolic links are skipped, whether they point at files or directories.
    Any directory that cannot be read raises ``OSError``.
    """
    files: List[str] = []
    pending = [os.path.abspath(root)]
    while pending:
        directory = pending.pop()
        with os.scandir(directory) as entries:
            for entry in entries:
                if entry.is_symlink():
                    pulumi.log.debug(f"Skipping symlink {entry.path}")
                    continue
                if entry.is_dir(follow_symlinks=False):
                    pending.append(entry.path)
                elif entry.is_file(follow_symlinks=False):
                    files.append(entry.path)
    files.sort()
    return files


def object_key(root: str, path: str) -> str:
    """Key for ``path``: its path relative to ``root`` using ``/`` separators."""
    relative = os.path.relpath(os.path.abspath(path), os.path.abspath(root))
    if os.sep != "/":
        relative = relative.replace(os.sep, "/")
    return relative.replace("\\", "/")


def guess_content_type(path: str) -> str:
    content_type, _ = mimetypes.guess_type(path)
    return content_type or DEFAULT_CONTENT_TYPE


def collect_site_objects(root: str) -> List[SiteObject]:
    """Walk ``root`` and pair every file with its object key.

    Raises ``ObjectKeyCollisionError`` when two files map to the same key.
    """
    if not os.path.isdir(root):
        raise FileNotFoundError(f"Client build directory not found: {root}")

    seen: Dict[str, str] = {}
    objects: List[SiteObject] = []
    for path in walk_files(root):
        key = object_key(root, path)
        if key in seen:
            raise ObjectKeyCollisionError(key, seen[key], path)
        seen[key] = path
        objects.append(SiteObject(key=key, path=path, content_type=guess_content_type(path)))

    pulumi.log.info(f"Found {len(objects)} client files under {root}")
    return objects
