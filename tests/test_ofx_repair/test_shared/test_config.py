"""Tests for the repair configuration system."""

import json

import pytest

from ofx_repair.shared.config import (
    BindingConfig,
    CharacterConfig,
    ConfigValidationError,
    GlobalConfig,
    RecoveryConfig,
    RepairConfig,
    TrailingTextPolicy,
)


class TestComponentConfigs:
    """Test validation of the component configurations."""

    def test_defaults(self):
        assert CharacterConfig().decode_errors == "strict"
        assert RecoveryConfig().root_tag == "OFX"
        assert RecoveryConfig().trailing_text == TrailingTextPolicy.FLUSH
        assert BindingConfig().apply_preprocessing
        assert GlobalConfig().logging_level == "WARNING"

    def test_invalid_decode_errors(self):
        with pytest.raises(ValueError, match="decode_errors must be 'strict' or 'replace'"):
            CharacterConfig(decode_errors="ignore")

    def test_empty_fallback_encoding(self):
        with pytest.raises(ValueError, match="fallback_encoding cannot be empty"):
            CharacterConfig(fallback_encoding="")

    @pytest.mark.parametrize("root_tag", ["", "<OFX>", "O FX", "/OFX"])
    def test_invalid_root_tag(self, root_tag):
        with pytest.raises(ValueError, match="root_tag must be a bare tag name"):
            RecoveryConfig(root_tag=root_tag)

    def test_extra_container_tags_become_frozen(self):
        config = RecoveryConfig(extra_container_tags={"CCSTMTRS"})
        assert config.extra_container_tags == frozenset({"CCSTMTRS"})

    def test_empty_container_tag(self):
        with pytest.raises(ValueError, match="extra_container_tags cannot contain empty names"):
            RecoveryConfig(extra_container_tags={""})

    def test_invalid_logging_level(self):
        with pytest.raises(ValueError, match="logging_level must be one of"):
            GlobalConfig(logging_level="LOUD")

    def test_invalid_size_limit(self):
        with pytest.raises(ValueError, match="max_input_size_bytes must be > 0 or None"):
            GlobalConfig(max_input_size_bytes=0)


class TestRepairConfig:
    """Test the complete configuration."""

    def test_is_immutable(self):
        config = RepairConfig()
        with pytest.raises(AttributeError):
            config.name = "changed"

    def test_conflicting_end_of_input_policies(self):
        with pytest.raises(ConfigValidationError) as info:
            RepairConfig(recovery=RecoveryConfig(
                trailing_text=TrailingTextPolicy.ERROR,
                close_unclosed_at_end=True,
            ))
        assert info.value.field_name == "recovery.close_unclosed_at_end"
        assert info.value.suggestions

    def test_override_component_fields(self):
        config = RepairConfig().override(
            recovery__strict_unmatched_close=True,
            character__decode_errors="replace",
            global___max_input_size_bytes=1024,
            name="custom",
        )
        assert config.recovery.strict_unmatched_close
        assert config.character.decode_errors == "replace"
        assert config.global_.max_input_size_bytes == 1024
        assert config.name == "custom"

    def test_override_leaves_original_untouched(self):
        original = RepairConfig()
        original.override(recovery__close_unclosed_at_end=True)
        assert not original.recovery.close_unclosed_at_end

    def test_override_unknown_component(self):
        with pytest.raises(ConfigValidationError, match="Unknown configuration component: parser"):
            RepairConfig().override(parser__mode="fast")

    def test_override_invalid_value(self):
        with pytest.raises(ConfigValidationError):
            RepairConfig().override(character__decode_errors="ignore")

    def test_override_unknown_field(self):
        with pytest.raises(ConfigValidationError):
            RepairConfig().override(recovery__no_such_field=True)


class TestSerialization:
    """Test dictionary and JSON conversion."""

    def test_to_dict(self):
        data = RepairConfig.strict().to_dict()
        assert data["recovery"]["trailing_text"] == "ERROR"
        assert data["recovery"]["extra_container_tags"] == []
        assert data["name"] == "strict"

    def test_json_round_trip(self):
        config = RepairConfig().override(
            recovery__extra_container_tags=frozenset({"CCSTMTRS", "CCACCTFROM"}),
            recovery__trailing_text=TrailingTextPolicy.DROP,
        )
        restored = RepairConfig.from_json(config.to_json())
        assert restored == config

    def test_from_dict_partial(self):
        config = RepairConfig.from_dict({"recovery": {"trailing_text": "DROP"}})
        assert config.recovery.trailing_text == TrailingTextPolicy.DROP
        assert config.character == CharacterConfig()

    def test_from_dict_unknown_field(self):
        with pytest.raises(ConfigValidationError, match="Unknown configuration field: typo"):
            RepairConfig.from_dict({"recovery": {"typo": 1}})

    def test_from_dict_invalid_enum(self):
        with pytest.raises(ConfigValidationError, match="Invalid value 'KEEP' for trailing_text") as info:
            RepairConfig.from_dict({"recovery": {"trailing_text": "KEEP"}})
        assert "FLUSH" in info.value.suggestions

    def test_from_dict_invalid_value(self):
        with pytest.raises(ConfigValidationError, match="logging_level must be one of"):
            RepairConfig.from_dict({"global_": {"logging_level": "LOUD"}})

    def test_to_json_is_valid_json(self):
        assert json.loads(RepairConfig().to_json())["global_"]["logging_level"] == "WARNING"


class TestPresets:
    """Test the preset factories."""

    def test_compatible(self):
        assert RepairConfig.compatible().recovery.trailing_text == TrailingTextPolicy.DROP

    def test_strict(self):
        config = RepairConfig.strict()
        assert config.recovery.trailing_text == TrailingTextPolicy.ERROR
        assert config.recovery.strict_unmatched_close

    def test_lenient(self):
        config = RepairConfig.lenient()
        assert config.character.decode_errors == "replace"
        assert config.recovery.close_unclosed_at_end

    def test_preset_lookup(self):
        assert RepairConfig.preset("default") == RepairConfig()
        assert RepairConfig.preset("strict").name == "strict"

    def test_unknown_preset(self):
        with pytest.raises(ConfigValidationError, match="Unknown preset: fast"):
            RepairConfig.preset("fast")
