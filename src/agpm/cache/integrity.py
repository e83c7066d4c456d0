"""Integrity fingerprints for artifact directories."""

import base64
import hashlib
import os
from pathlib import Path

from agpm.errors import IntegrityMismatchError

INTEGRITY_PREFIX = "sha256-"


def _list_files(dir_path: Path) -> list[tuple[str, Path]]:
    """Regular files under dir_path as (posix relative path, absolute path).

    Hidden files and anything under a hidden directory are skipped, as are
    symlinks.
    """
    files: list[tuple[str, Path]] = []
    for root, dirnames, filenames in os.walk(dir_path):
        dirnames[:] = [d for d in dirnames if not d.startswith(".")]
        root_path = Path(root)
        for filename in filenames:
            if filename.startswith("."):
                continue
            file_path = root_path / filename
            if file_path.is_symlink() or not file_path.is_file():
                continue
            files.append((file_path.relative_to(dir_path).as_posix(), file_path))
    return files


def compute_directory_integrity(dir_path: Path) -> str:
    """Compute a deterministic SHA-256 fingerprint of a directory tree.

    Files are sorted by relative path (byte order) and each contributes its
    relative path followed by its raw bytes, so renames change the result
    while timestamps, permissions and enumeration order do not.

    Args:
        dir_path: Directory to fingerprint

    Returns:
        Fingerprint string in format "sha256-<base64 digest>"
    """
    files = _list_files(dir_path)
    files.sort(key=lambda entry: entry[0].encode("utf-8"))

    digest = hashlib.sha256()
    for relative_path, file_path in files:
        digest.update(relative_path.encode("utf-8"))
        digest.update(file_path.read_bytes())

    encoded = base64.b64encode(digest.digest()).decode("ascii")
    return f"{INTEGRITY_PREFIX}{encoded}"


def verify_integrity(dir_path: Path, expected: str) -> bool:
    """Check whether dir_path still matches a recorded fingerprint."""
    return compute_directory_integrity(dir_path) == expected


def ensure_integrity(dir_path: Path, expected: str) -> None:
    """Raise IntegrityMismatchError if dir_path does not match expected."""
    actual = compute_directory_integrity(dir_path)
    if actual != expected:
        raise IntegrityMismatchError(dir_path, expected, actual)
