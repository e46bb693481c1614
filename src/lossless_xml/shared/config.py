"""Configuration classes for lossless XML parsing and serialization.

Component configurations are plain dataclasses validated in ``__post_init__``;
:class:`ParserConfig` composes them into one immutable object shared by the
tokenizer, tree builder and serializer.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

_COMPONENTS = ("tokenizer", "tree", "serializer", "global_")
_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class TokenizerConfig:
    """Configuration for comment stripping and tag tokenization."""

    strip_comments: bool = True

    def __post_init__(self) -> None:
        """Validate tokenizer configuration."""
        if not isinstance(self.strip_comments, bool):
            raise ValueError("strip_comments must be a boolean")


@dataclass
class TreeConfig:
    """Configuration for tree building and alias registration."""

    plural_suffix: str = "s"
    alias_sentinel: str = "_"
    drop_self_named_attributes: bool = True
    require_closed_document: bool = False

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if not self.plural_suffix:
            raise ValueError("plural_suffix cannot be empty")
        if len(self.alias_sentinel) != 1:
            raise ValueError("alias_sentinel must be a single character")


@dataclass
class SerializerConfig:
    """Configuration for writing a tree back to text."""

    indent_width: int = 4
    indent_char: str = " "
    newline: str = "\n"
    collapse_empty_elements: bool = True

    def __post_init__(self) -> None:
        """Validate serializer configuration."""
        if self.indent_width < 0:
            raise ValueError("indent_width must be >= 0")
        if self.indent_char not in (" ", "\t"):
            raise ValueError("indent_char must be a space or a tab")
        if self.newline not in ("\n", "\r\n"):
            raise ValueError("newline must be '\\n' or '\\r\\n'")

    @property
    def indent(self) -> str:
        """Indentation unit for one nesting level."""
        return self.indent_char * self.indent_width


@dataclass
class GlobalConfig:
    """Settings that apply across all components."""

    logging_level: str = "WARNING"
    enable_diagnostics: bool = True

    def __post_init__(self) -> None:
        """Validate global configuration."""
        if self.logging_level not in _LOGGING_LEVELS:
            raise ValueError(f"logging_level must be one of {_LOGGING_LEVELS}")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ParserConfig:
    """Complete configuration for all parser and serializer components.

    Immutable so one instance can be shared by independent parse calls.

    Examples:
        >>> config = ParserConfig()
        >>> config.serializer.indent_width
        4
        >>> config.override(serializer__indent_width=2).serializer.indent
        '  '
    """

    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    serializer: SerializerConfig = field(default_factory=SerializerConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        try:
            for component in _COMPONENTS:
                getattr(self, component).__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        if self.tree.alias_sentinel in self.tree.plural_suffix:
            raise ConfigValidationError(
                "alias_sentinel cannot appear in plural_suffix",
                field_name="tree.alias_sentinel",
                suggestions=["Use a sentinel such as '_' or '$'"],
            )

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: ``component__field=value`` pairs, or top-level fields

        Returns:
            New ParserConfig instance with overrides applied
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" not in key:
                top_level[key] = value
                continue
            # "global_" itself ends in an underscore, so match known prefixes.
            component = next(
                (name for name in _COMPONENTS if key.startswith(name + "__")), None
            )
            if component is None:
                raise ConfigValidationError(
                    f"Unknown configuration component in override: {key}",
                    field_name=key,
                )
            field_name = key[len(component) + 2:]
            nested_overrides.setdefault(component, {})[field_name] = value

        new_fields: Dict[str, Any] = dict(top_level)
        try:
            for component, changes in nested_overrides.items():
                new_fields[component] = replace(getattr(self, component), **changes)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        result: Dict[str, Any] = {}
        for component in _COMPONENTS:
            value = getattr(self, component)
            result[component] = {
                name: getattr(value, name) for name in value.__dataclass_fields__
            }
        result["name"] = self.name
        result["description"] = self.description
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Unknown component fields raise :class:`ConfigValidationError`.
        """
        component_types = {
            "tokenizer": TokenizerConfig,
            "tree": TreeConfig,
            "serializer": SerializerConfig,
            "global_": GlobalConfig,
        }
        fields: Dict[str, Any] = {}
        try:
            for component, component_type in component_types.items():
                if component in data:
                    fields[component] = component_type(**data[component])
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

        for key in ("name", "description"):
            if key in data:
                fields[key] = data[key]
        return cls(**fields)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def strict(cls) -> "ParserConfig":
        """Preset that rejects documents ending with unclosed elements."""
        return cls(
            tree=TreeConfig(require_closed_document=True),
            name="strict",
            description="Fail on elements left open at end of input",
        )

    @classmethod
    def compact(cls) -> "ParserConfig":
        """Preset writing two-space indentation."""
        return cls(
            serializer=SerializerConfig(indent_width=2),
            name="compact",
            description="Two-space indentation on output",
        )
