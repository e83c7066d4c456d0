"""Agent tools that artifacts can be installed into."""

from dataclasses import dataclass

from agpm.discovery.models import ArtifactType

DEFAULT_TARGET = "claude-code"


@dataclass(frozen=True)
class TargetDefinition:
    """Directory layout of one agent tool, relative to the project directory.

    A None subdirectory means the tool doesn't support that artifact type.
    """

    base_path: str
    skills_dir: str
    commands_dir: str | None = None
    hooks_dir: str | None = None

    def subdir_for(self, artifact_type: ArtifactType) -> str | None:
        if artifact_type == "skill":
            return self.skills_dir
        if artifact_type == "command":
            return self.commands_dir
        return self.hooks_dir


BUILT_IN_TARGETS: dict[str, TargetDefinition] = {
    "claude-code": TargetDefinition(
        base_path=".claude", skills_dir="skills", commands_dir="commands", hooks_dir="hooks"
    ),
    "opencode": TargetDefinition(base_path=".opencode", skills_dir="skills", hooks_dir="hooks"),
    "codex": TargetDefinition(base_path=".codex", skills_dir="skills"),
}


def is_valid_target(target_name: str) -> bool:
    return target_name in BUILT_IN_TARGETS


def get_target_path(target_name: str, artifact_type: ArtifactType) -> str | None:
    """Install directory for artifact_type under target_name, if supported."""
    target = BUILT_IN_TARGETS.get(target_name)
    if target is None:
        return None
    subdir = target.subdir_for(artifact_type)
    if subdir is None:
        return None
    return f"{target.base_path}/{subdir}"


def is_target_enabled(setting: object) -> bool:
    """`true` or a table enables a target; `false` disables it."""
    return setting is not False


def get_enabled_target_paths(
    targets: dict[str, object], artifact_type: ArtifactType
) -> list[str]:
    """Install directories of every enabled target supporting artifact_type.

    With no targets configured at all, claude-code is used.
    """
    if not targets:
        targets = {DEFAULT_TARGET: True}

    paths: list[str] = []
    for target_name, setting in targets.items():
        if not is_target_enabled(setting):
            continue
        path = get_target_path(target_name, artifact_type)
        if path is not None:
            paths.append(path)
    return paths
