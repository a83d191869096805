"""Configuration classes for OFX markup repair.

This module provides configuration objects for every stage of the pipeline:
decoding the raw bytes, the recovery pass, binding the repaired markup to the
statement model, and process-wide settings.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any, Dict, FrozenSet, List, Optional

_COMPONENTS = ("character", "recovery", "binding", "global_")


class TrailingTextPolicy(Enum):
    """What to do with a text run still pending when the input ends."""

    DROP = auto()    # Discard silently (legacy behaviour)
    FLUSH = auto()   # Attach to the pending leaf, warn if there is none
    ERROR = auto()   # Abort the pass with OrphanedTextError


@dataclass
class CharacterConfig:
    """Configuration for decoding the raw input bytes."""

    fallback_encoding: str = "utf-8"
    decode_errors: str = "strict"  # strict, replace
    detect_bom: bool = True
    honor_ofx_header: bool = True

    def __post_init__(self) -> None:
        """Validate character configuration."""
        if self.decode_errors not in ("strict", "replace"):
            raise ValueError("decode_errors must be 'strict' or 'replace'")
        if not self.fallback_encoding:
            raise ValueError("fallback_encoding cannot be empty")


@dataclass
class RecoveryConfig:
    """Configuration for the streaming tag-recovery pass."""

    root_tag: str = "OFX"
    extra_container_tags: FrozenSet[str] = field(default_factory=frozenset)
    trailing_text: TrailingTextPolicy = TrailingTextPolicy.FLUSH
    close_unclosed_at_end: bool = False
    strict_unmatched_close: bool = False

    def __post_init__(self) -> None:
        """Validate recovery configuration."""
        if not self.root_tag or any(c in self.root_tag for c in "<>/ \t\r\n"):
            raise ValueError("root_tag must be a bare tag name")
        self.extra_container_tags = frozenset(self.extra_container_tags)
        if any(not tag for tag in self.extra_container_tags):
            raise ValueError("extra_container_tags cannot contain empty names")


@dataclass
class BindingConfig:
    """Configuration for binding repaired markup to the statement model."""

    apply_preprocessing: bool = True
    count_transactions: bool = True


@dataclass
class GlobalConfig:
    """Global configuration settings that apply across all components."""

    logging_level: str = "WARNING"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    max_input_size_bytes: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate global configuration."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.logging_level not in valid_levels:
            raise ValueError(f"logging_level must be one of {valid_levels}")
        if self.max_input_size_bytes is not None and self.max_input_size_bytes <= 0:
            raise ValueError("max_input_size_bytes must be > 0 or None")


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
class RepairConfig:
    """Complete, immutable configuration for a repair pipeline.

    Safe to share between threads; every repair pass keeps its own mutable
    state and only reads from the configuration.
    """

    character: CharacterConfig = field(default_factory=CharacterConfig)
    recovery: RecoveryConfig = field(default_factory=RecoveryConfig)
    binding: BindingConfig = field(default_factory=BindingConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete configuration."""
        try:
            self.character.__post_init__()
            self.recovery.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        if (
            self.recovery.trailing_text == TrailingTextPolicy.ERROR
            and self.recovery.close_unclosed_at_end
        ):
            raise ConfigValidationError(
                "close_unclosed_at_end cannot be combined with the ERROR "
                "trailing text policy",
                field_name="recovery.close_unclosed_at_end",
                suggestions=["Use TrailingTextPolicy.FLUSH",
                             "Disable close_unclosed_at_end"],
            )

    def override(self, **kwargs: Any) -> "RepairConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override; component fields use
                ``component__field`` notation

        Returns:
            New RepairConfig instance with overrides applied

        Example:
            >>> config = RepairConfig()
            >>> strict = config.override(recovery__strict_unmatched_close=True)
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key and not key.startswith("global___"):
                component, field_name = key.split("__", 1)
            elif key.startswith("global___"):
                component, field_name = "global_", key[len("global___"):]
            else:
                nested_overrides[key] = value
                continue
            if component not in _COMPONENTS:
                raise ConfigValidationError(
                    f"Unknown configuration component: {component}",
                    field_name=key,
                    suggestions=[f"Use one of {', '.join(_COMPONENTS)}"],
                )
            nested_overrides.setdefault(component, {})[field_name] = value

        new_fields: Dict[str, Any] = {}
        for component in _COMPONENTS:
            current = getattr(self, component)
            if component in nested_overrides:
                overrides = nested_overrides[component]
                if isinstance(overrides, dict):
                    try:
                        new_fields[component] = replace(current, **overrides)
                    except (TypeError, ValueError) as e:
                        raise ConfigValidationError(str(e), field_name=component) from e
                else:
                    new_fields[component] = overrides

        for key, value in nested_overrides.items():
            if key not in _COMPONENTS:
                new_fields[key] = value

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            if isinstance(obj, (set, frozenset)):
                return sorted(obj)
            if isinstance(obj, (list, tuple)):
                return [_dataclass_to_dict(item) for item in obj]
            return obj

        return _dataclass_to_dict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RepairConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos in configuration files
        do not silently fall back to defaults.
        """
        def _dict_to_dataclass(data_dict: Dict[str, Any], target_class: type) -> Any:
            field_values: Dict[str, Any] = {}
            known = target_class.__dataclass_fields__
            for key, value in data_dict.items():
                if key not in known:
                    raise ConfigValidationError(
                        f"Unknown configuration field: {key}",
                        field_name=key,
                    )
                field_type = known[key].type
                if hasattr(field_type, "__dataclass_fields__"):
                    field_values[key] = _dict_to_dataclass(value, field_type)
                elif hasattr(field_type, "__members__") and isinstance(value, str):
                    try:
                        field_values[key] = field_type[value]
                    except KeyError as e:
                        raise ConfigValidationError(
                            f"Invalid value {value!r} for {key}",
                            field_name=key,
                            suggestions=list(field_type.__members__),
                        ) from e
                else:
                    field_values[key] = value
            try:
                return target_class(**field_values)
            except ValueError as e:
                raise ConfigValidationError(str(e)) from e

        return _dict_to_dataclass(data, cls)

    @classmethod
    def from_json(cls, json_str: str) -> "RepairConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def compatible(cls) -> "RepairConfig":
        """Preset reproducing the legacy cleaner exactly."""
        return cls(
            recovery=RecoveryConfig(trailing_text=TrailingTextPolicy.DROP),
            name="compatible",
            description="Drops trailing text and ignores stray closing tags",
        )

    @classmethod
    def strict(cls) -> "RepairConfig":
        """Preset that refuses any input whose repair would lose data."""
        return cls(
            recovery=RecoveryConfig(
                trailing_text=TrailingTextPolicy.ERROR,
                strict_unmatched_close=True,
            ),
            name="strict",
            description="Trailing text and unmatched leaf closes are fatal",
        )

    @classmethod
    def lenient(cls) -> "RepairConfig":
        """Preset for damaged downloads that should still produce a document."""
        return cls(
            character=CharacterConfig(decode_errors="replace"),
            recovery=RecoveryConfig(close_unclosed_at_end=True),
            name="lenient",
            description="Replaces undecodable bytes and closes truncated documents",
        )

    @classmethod
    def preset(cls, name: str) -> "RepairConfig":
        """Look up a preset by name."""
        presets = {
            "default": cls,
            "compatible": cls.compatible,
            "strict": cls.strict,
            "lenient": cls.lenient,
        }
        if name not in presets:
            raise ConfigValidationError(
                f"Unknown preset: {name}", suggestions=sorted(presets)
            )
        return presets[name]()
