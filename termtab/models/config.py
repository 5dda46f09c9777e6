"""Configuration models with Pydantic validation."""

from pydantic import BaseModel, Field, field_validator

from termtab.models.detection import DetectionStrategy


class TimeoutConfig(BaseModel):
    """Timeouts for external commands, in seconds."""

    probe: float = Field(
        default=3.0,
        gt=0,
        le=30,
        description="Timeout for cheap availability probes (kitty @ ls, ps, ...)",
    )
    command: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Timeout for open/close operations",
    )


class DetectionConfig(BaseModel):
    """Terminal detection chain configuration."""

    process_tree_max_depth: int = Field(
        default=5,
        ge=1,
        le=32,
        description="Maximum number of parent processes to inspect",
    )
    enabled_strategies: list[DetectionStrategy] = Field(
        default_factory=lambda: list(DetectionStrategy),
        description="Strategies the chain may use (fallback is always enabled)",
    )

    def is_enabled(self, strategy: DetectionStrategy) -> bool:
        return strategy == DetectionStrategy.FALLBACK or strategy in self.enabled_strategies


class SessionStoreConfig(BaseModel):
    """Where session records are stored inside a worktree."""

    directory: str = Field(
        default=".termtab",
        min_length=1,
        description="Hidden subdirectory of the worktree holding termtab state",
    )
    file_name: str = Field(
        default="session.json",
        min_length=1,
        description="Session record file name",
    )

    @field_validator("directory", "file_name")
    @classmethod
    def _no_traversal(cls, value: str) -> str:
        if value in (".", "..") or "/" in value or "\\" in value:
            raise ValueError(f"must be a single path component, got {value!r}")
        return value


class TermtabConfig(BaseModel):
    """Root configuration.

    Loaded from config.yaml and validated with Pydantic.
    """

    preferred_terminal: str | None = Field(
        default=None,
        description="Driver name to use when nothing else identifies the terminal",
    )
    timeouts: TimeoutConfig = Field(
        default_factory=TimeoutConfig,
        description="External command timeouts",
    )
    detection: DetectionConfig = Field(
        default_factory=DetectionConfig,
        description="Detection chain settings",
    )
    session_store: SessionStoreConfig = Field(
        default_factory=SessionStoreConfig,
        description="Session record location",
    )
