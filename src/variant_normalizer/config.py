"""Configuration file support for variant-normalizer."""

import logging
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

CONFIG_TABLE = "variant_normalizer"


@dataclass(frozen=True)
class NormalizerConfig:
    """Configuration for variant normalization.

    Set once before normalizing and read-only afterwards.
    """

    generate_reference_blocks: bool = False
    decompose_mnvs: bool = False
    normalize_alleles: bool = False
    reference_ploidy: int = 2
    genotype_array_fields: tuple[str, ...] = ("GL", "PL", "GP")
    allele_array_fields: tuple[str, ...] = ("AD",)
    copy_number_field: str = "CN"
    contig_aliases: dict[str, str] = field(default_factory=dict)
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NormalizerConfig":
        valid_fields = {f.name for f in fields(cls)}
        unknown = set(data) - valid_fields
        if unknown:
            logger.warning("Ignoring unknown configuration keys: %s", ", ".join(sorted(unknown)))

        values = {k: v for k, v in data.items() if k in valid_fields}
        for key in ("genotype_array_fields", "allele_array_fields"):
            if key in values:
                values[key] = tuple(values[key])
        if "log_level" in values:
            values["log_level"] = values["log_level"].upper()
        return cls(**values)


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    pass


def validate_config(config_dict: dict[str, Any]) -> None:
    """Validate configuration values.

    Raises:
        ConfigValidationError: If any configuration value is invalid.
    """
    for key in ("generate_reference_blocks", "decompose_mnvs", "normalize_alleles"):
        if key in config_dict and not isinstance(config_dict[key], bool):
            raise ConfigValidationError(
                f"{key} must be a boolean, got {type(config_dict[key]).__name__}"
            )

    if "reference_ploidy" in config_dict:
        ploidy = config_dict["reference_ploidy"]
        if not isinstance(ploidy, int) or isinstance(ploidy, bool):
            raise ConfigValidationError(
                f"reference_ploidy must be an integer, got {type(ploidy).__name__}"
            )
        if ploidy <= 0:
            raise ConfigValidationError(f"reference_ploidy must be positive, got {ploidy}")

    for key in ("genotype_array_fields", "allele_array_fields"):
        if key in config_dict:
            value = config_dict[key]
            if not isinstance(value, list | tuple) or not all(isinstance(v, str) for v in value):
                raise ConfigValidationError(f"{key} must be a list of field names")

    if "copy_number_field" in config_dict:
        if not isinstance(config_dict["copy_number_field"], str) or not config_dict["copy_number_field"]:
            raise ConfigValidationError("copy_number_field must be a non-empty string")

    if "contig_aliases" in config_dict:
        aliases = config_dict["contig_aliases"]
        if not isinstance(aliases, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in aliases.items()
        ):
            raise ConfigValidationError("contig_aliases must be a table of contig names")

    if "log_level" in config_dict:
        log_level = config_dict["log_level"]
        if not isinstance(log_level, str):
            raise ConfigValidationError(
                f"log_level must be a string, got {type(log_level).__name__}"
            )
        if log_level.upper() not in VALID_LOG_LEVELS:
            raise ConfigValidationError(
                f"log_level must be one of {VALID_LOG_LEVELS}, got '{log_level}'"
            )


def load_config(config_path: Path, overrides: dict[str, Any] | None = None) -> NormalizerConfig:
    """Load configuration from a TOML file.

    Args:
        config_path: Path to the TOML configuration file.
        overrides: Optional dict of values to override loaded config.

    Returns:
        NormalizerConfig instance with loaded values.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ConfigValidationError: If any configuration value is invalid.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "rb") as f:
        toml_data = tomllib.load(f)

    config_dict = toml_data.get(CONFIG_TABLE, {})

    if overrides:
        config_dict.update(overrides)

    validate_config(config_dict)

    return NormalizerConfig.from_dict(config_dict)
