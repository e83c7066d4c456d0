"""Artifact metadata from descriptor files.

Marketplace and plugin repositories describe a skill with YAML frontmatter in
SKILL.md (or AGENTS.md); simple repositories use a metadata.json sidecar.
A missing file is a normal None/empty result, a malformed one is an error.
"""

import json
from dataclasses import dataclass
from pathlib import Path

import frontmatter
import yaml

from agpm.errors import ManifestParseError

# Checked in order; the first existing file wins
SKILL_DESCRIPTOR_FILES = ("SKILL.md", "AGENTS.md")

SIDECAR_FILE = "metadata.json"


@dataclass(frozen=True)
class FrontmatterParseResult:
    """Result of parsing frontmatter from markdown content.

    Attributes:
        metadata: Parsed frontmatter mapping, or None if there is no usable block.
        body: Content after the frontmatter (always present).
        error: Error message if the block exists but is not valid YAML.
    """

    metadata: dict[str, object] | None
    body: str
    error: str | None


def parse_markdown_frontmatter(content: str) -> FrontmatterParseResult:
    """Parse YAML frontmatter from markdown content.

    Handles these cases:
    - Valid frontmatter: returns metadata dict and body
    - No frontmatter: metadata is None, no error
    - Empty or non-mapping frontmatter: metadata is None, no error
    - Invalid YAML: returns error
    """
    if not content.startswith("---"):
        return FrontmatterParseResult(metadata=None, body=content, error=None)

    try:
        post = frontmatter.loads(content)
    except yaml.YAMLError as e:
        return FrontmatterParseResult(metadata=None, body=content, error=f"Invalid YAML: {e}")

    if not isinstance(post.metadata, dict) or not post.metadata:
        return FrontmatterParseResult(metadata=None, body=post.content, error=None)

    return FrontmatterParseResult(metadata=dict(post.metadata), body=post.content, error=None)


def read_skill_metadata(skill_dir: Path) -> dict[str, object] | None:
    """Read a skill's metadata from its descriptor file.

    Returns:
        Frontmatter fields with "name" defaulting to the directory name;
        {"name": <dir>} if the descriptor has no frontmatter;
        None if neither descriptor file exists.

    Raises:
        ManifestParseError: If the descriptor's frontmatter is not valid YAML
    """
    for filename in SKILL_DESCRIPTOR_FILES:
        descriptor = skill_dir / filename
        if not descriptor.is_file():
            continue

        result = parse_markdown_frontmatter(descriptor.read_text(encoding="utf-8"))
        if result.error is not None:
            raise ManifestParseError(descriptor, result.error)
        if result.metadata is None:
            return {"name": skill_dir.name}

        metadata = dict(result.metadata)
        name = metadata.get("name")
        metadata["name"] = str(name) if name else skill_dir.name
        return metadata

    return None


def read_sidecar_metadata(skill_dir: Path) -> dict[str, object]:
    """Read a simple-format skill's metadata.json.

    Returns an empty dict when the sidecar doesn't exist.

    Raises:
        ManifestParseError: If the sidecar is not a JSON object
    """
    sidecar = skill_dir / SIDECAR_FILE
    if not sidecar.is_file():
        return {}
    try:
        data = json.loads(sidecar.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ManifestParseError(sidecar, f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ManifestParseError(sidecar, "expected a JSON object")
    return data


def optional_str(value: object) -> str | None:
    """Coerce a metadata value to a string, treating missing/empty as None."""
    if value is None or value == "":
        return None
    return str(value)
