"""Copy artifacts from cache snapshots into target directories."""

import logging
import shutil
from pathlib import Path

from agpm.discovery.models import ArtifactType
from agpm.install.targets import get_enabled_target_paths

logger = logging.getLogger(__name__)


def _remove_existing(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.exists():
        shutil.rmtree(path)


def install_artifact(
    source_path: Path,
    artifact_name: str,
    project_dir: Path,
    targets: dict[str, object],
    artifact_type: ArtifactType = "skill",
) -> list[str]:
    """Install one artifact directory into every enabled target.

    Any previously installed copy is replaced wholesale, so files removed
    upstream don't linger.

    Args:
        source_path: Artifact directory inside a cache snapshot
        artifact_name: Directory name to install under
        project_dir: Project root directory
        targets: Target settings from agpm.toml
        artifact_type: Kind of artifact, selects the target subdirectory

    Returns:
        Installed paths relative to project_dir
    """
    if not source_path.is_dir():
        msg = f"Artifact directory does not exist: {source_path}"
        raise FileNotFoundError(msg)

    installed: list[str] = []
    for target_dir in get_enabled_target_paths(targets, artifact_type):
        destination = project_dir / target_dir / artifact_name
        _remove_existing(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copytree(source_path, destination)
        logger.debug("installed %s into %s", artifact_name, destination)
        installed.append(f"{target_dir}/{artifact_name}")
    return installed


def uninstall_artifact(
    artifact_name: str,
    project_dir: Path,
    targets: dict[str, object],
    artifact_type: ArtifactType = "skill",
) -> list[str]:
    """Remove installed copies of an artifact from every enabled target.

    Returns:
        Removed paths relative to project_dir
    """
    removed: list[str] = []
    for target_dir in get_enabled_target_paths(targets, artifact_type):
        destination = project_dir / target_dir / artifact_name
        if not (destination.exists() or destination.is_symlink()):
            continue
        _remove_existing(destination)
        removed.append(f"{target_dir}/{artifact_name}")
    return removed
