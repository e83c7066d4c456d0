"""Project configuration models for agpm.toml."""

from dataclasses import dataclass, field, replace

from agpm.sources.parsing import Source

CONFIG_VERSION = "1"


@dataclass(frozen=True)
class AgpmConfig:
    """Project configuration from agpm.toml.

    artifacts holds declared artifact references ("<source>/<name>[@<ref>]"),
    collections holds collection references ("<source>/<collection>").
    targets maps a target name to true/false or a table of options.
    """

    version: str = CONFIG_VERSION
    targets: dict[str, object] = field(default_factory=dict)
    sources: list[Source] = field(default_factory=list)
    artifacts: list[str] = field(default_factory=list)
    collections: list[str] = field(default_factory=list)

    def find_source(self, name: str) -> Source | None:
        for source in self.sources:
            if source.name == name:
                return source
        return None

    def with_source(self, source: Source) -> "AgpmConfig":
        """Return new config with source added, replacing one of the same name."""
        remaining = [s for s in self.sources if s.name != source.name]
        return replace(self, sources=[*remaining, source])

    def without_source(self, name: str) -> "AgpmConfig":
        return replace(self, sources=[s for s in self.sources if s.name != name])

    def with_artifact(self, reference: str) -> "AgpmConfig":
        if reference in self.artifacts:
            return self
        return replace(self, artifacts=[*self.artifacts, reference])

    def without_artifact(self, reference: str) -> "AgpmConfig":
        return replace(self, artifacts=[a for a in self.artifacts if a != reference])

    def with_collection(self, reference: str) -> "AgpmConfig":
        if reference in self.collections:
            return self
        return replace(self, collections=[*self.collections, reference])

    def without_collection(self, reference: str) -> "AgpmConfig":
        return replace(self, collections=[c for c in self.collections if c != reference])
