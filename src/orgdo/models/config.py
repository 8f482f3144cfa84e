"""Configuration models for orgdo."""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from org_outline import WorkflowStates

FALLBACK_COLOR = "99"


class StateConfig(BaseModel):
    """A single workflow state."""

    name: str = Field(..., description="State keyword as written in headings (e.g. 'TODO')")

    color: str = Field(
        default=FALLBACK_COLOR,
        description="Terminal colour code used when displaying the state"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """State names must be a single non-empty word."""
        v = v.strip()
        if not v:
            raise ValueError("State name must not be empty")
        if any(ch.isspace() for ch in v):
            raise ValueError(f"State name must not contain whitespace: {v!r}")
        return v

    model_config = {"frozen": True}


def _default_states() -> list[StateConfig]:
    return [
        StateConfig(name="TODO", color="202"),
        StateConfig(name="PROG", color="220"),
        StateConfig(name="BLOCK", color="196"),
        StateConfig(name="DONE", color="34"),
    ]


class StatesConfig(BaseModel):
    """Workflow states in cycling order. The last one is the done state."""

    states: list[StateConfig] = Field(
        default_factory=_default_states,
        description="Workflow states in cycling order"
    )

    default_new_task_state: Optional[str] = Field(
        default="TODO",
        description="State given to captured items (empty or null for none)"
    )

    @field_validator("states")
    @classmethod
    def validate_unique(cls, v: list[StateConfig]) -> list[StateConfig]:
        """Reject duplicate state names; an empty list means the defaults."""
        if not v:
            return _default_states()
        names = [state.name for state in v]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate state names: {', '.join(duplicates)}")
        return v

    model_config = {"frozen": True}


class TagConfig(BaseModel):
    """A known tag and its display colour."""

    name: str = Field(..., min_length=1, description="Tag name without colons")
    color: str = Field(default=FALLBACK_COLOR, description="Terminal colour code")

    model_config = {"frozen": True}


def _default_tags() -> list[TagConfig]:
    return [
        TagConfig(name="work", color="99"),
        TagConfig(name="personal", color="141"),
        TagConfig(name="urgent", color="196"),
        TagConfig(name="important", color="220"),
    ]


class TagsConfig(BaseModel):
    """Tag settings."""

    enabled: bool = Field(default=True, description="Whether tags are displayed")
    default_tag: str = Field(default="work", description="Tag suggested for new items")
    tags: list[TagConfig] = Field(default_factory=_default_tags, description="Known tags")

    model_config = {"frozen": True}


class FilesConfig(BaseModel):
    """Where outlines are read from."""

    default_file: str = Field(
        default="todo.org",
        description="File used when no path is given on the command line"
    )

    pattern: str = Field(
        default="*.org",
        description="Glob used to pick files in multi-file mode"
    )

    model_config = {"frozen": True}


class UIConfig(BaseModel):
    """Display settings."""

    agenda_days: int = Field(
        default=7,
        ge=1,
        le=366,
        description="Number of days covered by the agenda view"
    )

    model_config = {"frozen": True}


class Config(BaseModel):
    """Root configuration for orgdo."""

    states: StatesConfig = Field(default_factory=StatesConfig, description="Workflow states")
    tags: TagsConfig = Field(default_factory=TagsConfig, description="Tag settings")
    files: FilesConfig = Field(default_factory=FilesConfig, description="File locations")
    ui: UIConfig = Field(default_factory=UIConfig, description="Display settings")

    @model_validator(mode="before")
    @classmethod
    def drop_empty_sections(cls, data):
        """Treat ``section:`` with no value in YAML as a missing section."""
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    @classmethod
    def load(cls, path: Path) -> "Config":
        """
        Load configuration from a YAML file.

        Args:
            path: Path to config.yaml file

        Returns:
            Validated Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If YAML is invalid or validation fails
        """
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found at {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration in {path} must be a mapping")

        return cls(**data)

    def save(self, path: Path) -> None:
        """Write the configuration as YAML, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(self.model_dump(), f, sort_keys=False)

    # Workflow states

    @property
    def state_names(self) -> list[str]:
        return [state.name for state in self.states.states]

    def workflow(self) -> WorkflowStates:
        """Build the engine's workflow-state value from this configuration."""
        return WorkflowStates(
            names=tuple(self.state_names),
            default_new_state=self.states.default_new_task_state or None,
        )

    def state_color(self, name: Optional[str]) -> str:
        for state in self.states.states:
            if state.name == name:
                return state.color
        return FALLBACK_COLOR

    # Tags

    def tag_color(self, name: str) -> str:
        for tag in self.tags.tags:
            if tag.name == name:
                return tag.color
        return FALLBACK_COLOR

    model_config = {"frozen": True}
