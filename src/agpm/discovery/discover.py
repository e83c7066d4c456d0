"""Enumerate the artifacts and collections a repository publishes.

Formats:
- claude-marketplace: .claude-plugin/marketplace.json lists plugins; each
  plugin is one collection. A plugin's explicit "skills" paths are
  authoritative, otherwise <source>/skills/ is scanned.
- claude-plugin: .claude-plugin/plugin.json; skills/ plus any extra
  directories the manifest names. The plugin is one collection.
- simple: every directory under skills/ is a skill, described by an optional
  metadata.json sidecar. No collections.

A skill path claimed by one plugin is never reported again for another.
"""

import json
import logging
from pathlib import Path, PurePosixPath

from agpm.discovery.detection import (
    SKILLS_DIR,
    detect_format,
    marketplace_manifest_path,
    plugin_manifest_path,
)
from agpm.discovery.metadata import (
    optional_str,
    read_sidecar_metadata,
    read_skill_metadata,
)
from agpm.discovery.models import (
    DiscoveredArtifact,
    DiscoveredCollection,
    DiscoveryResult,
    RepoFormat,
)
from agpm.errors import InvalidReferenceError, ManifestParseError
from agpm.sources.parsing import Source, SourceFormat, is_contained_path

logger = logging.getLogger(__name__)


def _load_manifest(manifest_path: Path) -> dict[str, object] | None:
    """Load a JSON manifest; None if the file doesn't exist."""
    if not manifest_path.is_file():
        return None
    try:
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ManifestParseError(manifest_path, f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ManifestParseError(manifest_path, "expected a JSON object")
    return data


def _normalize_path(raw: str) -> str | None:
    """Normalize a manifest path relative to the discovery root.

    "./skills/pdf/" becomes "skills/pdf" and "./" becomes "". Returns None for
    absolute paths and paths that climb out of the root.
    """
    candidate = raw.strip().replace("\\", "/")
    if candidate.startswith("/"):
        return None
    parts = [part for part in candidate.split("/") if part not in ("", ".")]
    if ".." in parts:
        return None
    return "/".join(parts)


def _as_path_list(value: object) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    return []


def _skill_artifact(
    root: Path,
    relative_path: str,
    fmt: RepoFormat,
    fallback_description: str | None,
) -> DiscoveredArtifact:
    metadata = read_skill_metadata(root / relative_path)
    dir_name = PurePosixPath(relative_path).name
    if metadata is None:
        name = dir_name
        description = fallback_description
    else:
        name = optional_str(metadata.get("name")) or dir_name
        description = optional_str(metadata.get("description")) or fallback_description
    return DiscoveredArtifact(
        name=name,
        description=description,
        artifact_type="skill",
        path=relative_path,
        format=fmt,
        metadata=metadata,
    )


def _skills_from_paths(
    root: Path,
    raw_paths: list[str],
    seen: set[str],
    fmt: RepoFormat,
    fallback_description: str | None,
) -> list[DiscoveredArtifact]:
    """Skills at explicitly listed paths, skipping paths already claimed."""
    artifacts: list[DiscoveredArtifact] = []
    for raw in raw_paths:
        relative_path = _normalize_path(raw)
        if not relative_path:
            logger.warning("Skipping skill path outside the repository: %s", raw)
            continue
        if relative_path in seen:
            continue
        if not (root / relative_path).is_dir():
            logger.warning("Skipping missing skill path: %s", raw)
            continue
        seen.add(relative_path)
        artifacts.append(_skill_artifact(root, relative_path, fmt, fallback_description))
    return artifacts


def _skills_from_directory(
    root: Path,
    skills_dir: str,
    seen: set[str],
    fmt: RepoFormat,
    fallback_description: str | None,
) -> list[DiscoveredArtifact]:
    """Every non-hidden subdirectory of skills_dir, skipping paths already claimed."""
    directory = root / skills_dir if skills_dir else root
    if not directory.is_dir():
        return []

    artifacts: list[DiscoveredArtifact] = []
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if not entry.is_dir() or entry.name.startswith("."):
            continue
        relative_path = entry.relative_to(root).as_posix()
        if relative_path in seen:
            continue
        seen.add(relative_path)
        artifacts.append(_skill_artifact(root, relative_path, fmt, fallback_description))
    return artifacts


def _group_metadata(entry: dict[str, object]) -> dict[str, object]:
    return {key: entry[key] for key in ("version", "author") if entry.get(key) is not None}


def _discover_marketplace(root: Path) -> DiscoveryResult:
    manifest_path = marketplace_manifest_path(root)
    manifest = _load_manifest(manifest_path)
    if manifest is None:
        return DiscoveryResult(format="claude-marketplace")

    plugins = manifest.get("plugins", [])
    if not isinstance(plugins, list):
        raise ManifestParseError(manifest_path, "'plugins' must be a list")

    artifacts: list[DiscoveredArtifact] = []
    collections: list[DiscoveredCollection] = []
    seen: set[str] = set()

    for index, plugin in enumerate(plugins):
        if not isinstance(plugin, dict):
            raise ManifestParseError(manifest_path, f"plugins[{index}] must be an object")
        plugin_name = optional_str(plugin.get("name"))
        if plugin_name is None:
            raise ManifestParseError(manifest_path, f"plugins[{index}] is missing 'name'")
        description = optional_str(plugin.get("description"))

        # A non-string source (e.g. a remote source object) scans the root
        source = plugin.get("source")
        source_path = _normalize_path(source) if isinstance(source, str) else ""

        explicit_paths = _as_path_list(plugin.get("skills"))
        if explicit_paths:
            contributed = _skills_from_paths(
                root, explicit_paths, seen, "claude-marketplace", description
            )
        elif source and source_path is not None:
            skills_dir = f"{source_path}/{SKILLS_DIR}" if source_path else SKILLS_DIR
            contributed = _skills_from_directory(
                root, skills_dir, seen, "claude-marketplace", description
            )
        else:
            if source:
                logger.warning("Skipping plugin %s: source outside the repository", plugin_name)
            contributed = []

        artifacts.extend(contributed)
        if contributed:
            collections.append(
                DiscoveredCollection(
                    name=plugin_name,
                    description=description,
                    artifacts=[artifact.name for artifact in contributed],
                    path=source_path or ".",
                    metadata=_group_metadata(plugin),
                )
            )

    return DiscoveryResult(
        artifacts=artifacts, collections=collections, format="claude-marketplace"
    )


def _discover_plugin(root: Path) -> DiscoveryResult:
    manifest = _load_manifest(plugin_manifest_path(root))
    if manifest is None:
        return DiscoveryResult(format="claude-plugin")

    description = optional_str(manifest.get("description"))

    # Manifest "skills" entries are directories containing skills
    skills_dirs: list[str] = []
    for raw in _as_path_list(manifest.get("skills")):
        normalized = _normalize_path(raw)
        if normalized is None:
            logger.warning("Skipping skills directory outside the repository: %s", raw)
            continue
        skills_dirs.append(normalized)
    skills_dirs.append(SKILLS_DIR)

    seen: set[str] = set()
    artifacts: list[DiscoveredArtifact] = []
    for skills_dir in skills_dirs:
        artifacts.extend(
            _skills_from_directory(root, skills_dir, seen, "claude-plugin", description)
        )

    if not artifacts:
        return DiscoveryResult(format="claude-plugin")

    collection = DiscoveredCollection(
        name=optional_str(manifest.get("name")) or root.name,
        description=description,
        artifacts=[artifact.name for artifact in artifacts],
        path=".",
        metadata=_group_metadata(manifest),
    )
    return DiscoveryResult(artifacts=artifacts, collections=[collection], format="claude-plugin")


def _discover_simple(root: Path, result_format: RepoFormat) -> DiscoveryResult:
    skills_dir = root / SKILLS_DIR
    if not skills_dir.is_dir():
        return DiscoveryResult(format=result_format)

    artifacts: list[DiscoveredArtifact] = []
    for entry in sorted(skills_dir.iterdir(), key=lambda p: p.name):
        if not entry.is_dir() or entry.name.startswith("."):
            continue
        metadata = read_sidecar_metadata(entry)
        artifacts.append(
            DiscoveredArtifact(
                name=optional_str(metadata.get("name")) or entry.name,
                description=optional_str(metadata.get("description"))
                or optional_str(metadata.get("abstract")),
                artifact_type="skill",
                path=f"{SKILLS_DIR}/{entry.name}",
                format="simple",
                metadata=metadata or None,
            )
        )
    return DiscoveryResult(artifacts=artifacts, format=result_format)


def discover(
    repo_root: Path,
    *,
    subdir: str | None = None,
    explicit_format: SourceFormat | None = None,
) -> DiscoveryResult:
    """Discover all artifacts and collections under repo_root (or its subdir).

    Args:
        repo_root: Repository root, usually a cache snapshot
        subdir: Optional subtree to search within
        explicit_format: Skips detection unless None or "auto"

    Returns:
        DiscoveryResult; empty lists when nothing is published

    Raises:
        InvalidReferenceError: If subdir points outside repo_root
        ManifestParseError: If a manifest or descriptor is malformed
    """
    if subdir and not is_contained_path(subdir):
        raise InvalidReferenceError(subdir, "subdir must stay inside the repository")
    search_root = repo_root / subdir if subdir else repo_root
    if explicit_format is None or explicit_format == "auto":
        fmt = detect_format(search_root)
    else:
        fmt = explicit_format
    logger.debug("discovering %s as %s", search_root, fmt)

    if fmt == "claude-marketplace":
        return _discover_marketplace(search_root)
    if fmt == "claude-plugin":
        return _discover_plugin(search_root)
    if fmt == "simple":
        return _discover_simple(search_root, "simple")
    # Unknown layout: best effort with the simple strategy
    return _discover_simple(search_root, "unknown")


def discover_source(repo_root: Path, source: Source) -> DiscoveryResult:
    """Discover using a source's subdir and format override."""
    return discover(repo_root, subdir=source.subdir, explicit_format=source.explicit_format)
