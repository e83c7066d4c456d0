"""Detect which manifest convention a repository uses."""

from pathlib import Path

from agpm.discovery.models import RepoFormat

MANIFEST_DIR = ".claude-plugin"
MARKETPLACE_MANIFEST = "marketplace.json"
PLUGIN_MANIFEST = "plugin.json"
SKILLS_DIR = "skills"


def marketplace_manifest_path(root: Path) -> Path:
    return root / MANIFEST_DIR / MARKETPLACE_MANIFEST


def plugin_manifest_path(root: Path) -> Path:
    return root / MANIFEST_DIR / PLUGIN_MANIFEST


def detect_format(root: Path) -> RepoFormat:
    """Return the first matching format, most specific first.

    Order: marketplace manifest, plugin manifest, skills/ directory.
    A repository with both a marketplace manifest and a skills/ directory
    is a marketplace.
    """
    if marketplace_manifest_path(root).is_file():
        return "claude-marketplace"
    if plugin_manifest_path(root).is_file():
        return "claude-plugin"
    if (root / SKILLS_DIR).is_dir():
        return "simple"
    return "unknown"
