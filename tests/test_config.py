"""Tests for TOML configuration loading."""

import logging

import pytest

from variant_normalizer.config import (
    ConfigValidationError,
    NormalizerConfig,
    load_config,
    validate_config,
)


@pytest.fixture
def write_config(tmp_path):
    def _write(content: str):
        path = tmp_path / "normalizer.toml"
        path.write_text(content)
        return path

    return _write


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_table(self, write_config):
        config = load_config(write_config("[other]\nkey = 1\n"))
        assert config == NormalizerConfig()

    def test_values_from_table(self, write_config):
        path = write_config(
            "[variant_normalizer]\n"
            "generate_reference_blocks = true\n"
            "decompose_mnvs = true\n"
            "reference_ploidy = 1\n"
            'genotype_array_fields = ["PL"]\n'
            'log_level = "debug"\n'
            "\n"
            "[variant_normalizer.contig_aliases]\n"
            'M = "MT"\n'
        )

        config = load_config(path)

        assert config.generate_reference_blocks
        assert config.decompose_mnvs
        assert not config.normalize_alleles
        assert config.reference_ploidy == 1
        assert config.genotype_array_fields == ("PL",)
        assert config.log_level == "DEBUG"
        assert config.contig_aliases == {"M": "MT"}

    def test_overrides_win(self, write_config):
        path = write_config("[variant_normalizer]\nnormalize_alleles = false\n")

        config = load_config(path, {"normalize_alleles": True})

        assert config.normalize_alleles

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.toml")

    def test_invalid_value_rejected(self, write_config):
        path = write_config("[variant_normalizer]\nreference_ploidy = 0\n")
        with pytest.raises(ConfigValidationError, match="positive"):
            load_config(path)

    def test_unknown_keys_warn(self, write_config, caplog):
        path = write_config("[variant_normalizer]\nbatch_size = 10\n")

        with caplog.at_level(logging.WARNING, logger="variant_normalizer.config"):
            config = load_config(path)

        assert config == NormalizerConfig()
        assert "batch_size" in caplog.text


class TestValidateConfig:
    """Tests for value checks."""

    @pytest.mark.parametrize("config_dict,message", [
        ({"decompose_mnvs": "yes"}, "boolean"),
        ({"reference_ploidy": "2"}, "integer"),
        ({"reference_ploidy": True}, "integer"),
        ({"reference_ploidy": -1}, "positive"),
        ({"allele_array_fields": "AD"}, "list"),
        ({"genotype_array_fields": ["PL", 3]}, "list"),
        ({"copy_number_field": ""}, "non-empty"),
        ({"contig_aliases": {"M": 1}}, "contig"),
        ({"log_level": "LOUD"}, "log_level"),
        ({"log_level": 10}, "string"),
    ])
    def test_invalid(self, config_dict, message):
        with pytest.raises(ConfigValidationError, match=message):
            validate_config(config_dict)

    def test_valid(self):
        validate_config({
            "generate_reference_blocks": False,
            "reference_ploidy": 2,
            "allele_array_fields": ["AD", "XR"],
            "copy_number_field": "CN",
            "contig_aliases": {"chrM": "MT"},
            "log_level": "warning",
        })


class TestFromDict:
    """Tests for NormalizerConfig.from_dict."""

    def test_lists_become_tuples(self):
        config = NormalizerConfig.from_dict({"allele_array_fields": ["AD", "XR"]})
        assert config.allele_array_fields == ("AD", "XR")

    def test_log_level_uppercased(self):
        assert NormalizerConfig.from_dict({"log_level": "error"}).log_level == "ERROR"

    def test_config_is_frozen(self):
        config = NormalizerConfig()
        with pytest.raises(AttributeError):
            config.decompose_mnvs = True
