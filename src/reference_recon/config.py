"""Configuration loader and validation for reference matching settings."""

from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError

from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class InputConfig(BaseModel):
    """Configuration for transaction file loading."""

    encoding: str = "utf-8"
    csv: dict[str, Any] = Field(
        default_factory=lambda: {
            "delimiter": ",",
            "date_format": "%Y-%m-%d",
            "column_mappings": {
                "id": "id",
                "description": "description",
                "amount": "amount",
                "currency": "currency",
                "value_date": "valueDate",
                "counterparty": "counterparty",
            },
        }
    )


class StrategyConfig(BaseModel):
    """A matching strategy with priority and confidence."""

    name: str
    description: str = ""
    priority: int = 99
    enabled: bool = True
    confidence: float = Field(ge=0.0, le=1.0)


class SearchSettings(BaseModel):
    """Limits and suggestion settings for reference search."""

    max_matches: int = 20
    max_suggestions: int = 10
    amount_tolerance: float = 0.01
    suggestion_counterparties: int = 3
    recent_window: int = 50
    recent_patterns: int = 3
    recent_min_confidence: float = 0.7
    recent_min_length: int = 4


class FuzzySettings(BaseModel):
    """Settings for fuzzy description search."""

    threshold: float = Field(default=0.6, ge=0.0, le=1.0)


class MatchingConfig(BaseModel):
    """Configuration for the search engine."""

    strategies: list[StrategyConfig] = Field(
        default_factory=lambda: [
            StrategyConfig(**s) for s in get_default_config()["matching"]["strategies"]
        ]
    )
    settings: SearchSettings = Field(default_factory=SearchSettings)
    fuzzy: FuzzySettings = Field(default_factory=FuzzySettings)


class DuplicatesConfig(BaseModel):
    """Configuration for duplicate detection."""

    tolerance_hours: float = Field(default=24.0, ge=0.0)
    description_similarity_threshold: float = 0.8
    amount_tolerance: float = 0.01


class ExcelOutputConfig(BaseModel):
    """Configuration for Excel output."""

    # {date} and {time} are filled in when -o names a directory
    filename_template: str = "reference_report_{date}_{time}.xlsx"


class SheetConfig(BaseModel):
    """Configuration for a report sheet."""

    enabled: bool = True
    name: str


class SheetsConfig(BaseModel):
    """Configuration for all report sheets."""

    summary: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Summary"))
    patterns: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Reference Patterns")
    )
    matches: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Matches"))
    suggestions: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Suggestions"))
    duplicates: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Duplicates"))


class OutputConfig(BaseModel):
    """Configuration for output."""

    excel: ExcelOutputConfig = Field(default_factory=ExcelOutputConfig)
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ReconConfig(BaseModel):
    """Main configuration model for reference matching."""

    input: InputConfig = Field(default_factory=InputConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    duplicates: DuplicatesConfig = Field(default_factory=DuplicatesConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return {
        "input": {
            "encoding": "utf-8",
            "csv": {
                "delimiter": ",",
                "date_format": "%Y-%m-%d",
                "column_mappings": {
                    "id": "id",
                    "description": "description",
                    "amount": "amount",
                    "currency": "currency",
                    "value_date": "valueDate",
                    "counterparty": "counterparty",
                },
            },
        },
        "matching": {
            "strategies": [
                {
                    "name": "exact_reference",
                    "description": "Reference token shared by query and description",
                    "priority": 1,
                    "enabled": True,
                    "confidence": 0.95,
                },
                {
                    "name": "partial_description",
                    "description": "Description contains the query text",
                    "priority": 2,
                    "enabled": True,
                    "confidence": 0.7,
                },
                {
                    "name": "amount",
                    "description": "Amount in the query equals the transaction amount",
                    "priority": 3,
                    "enabled": True,
                    "confidence": 0.8,
                },
                {
                    "name": "counterparty",
                    "description": "Counterparty name contains the query text",
                    "priority": 4,
                    "enabled": True,
                    "confidence": 0.85,
                },
            ],
            "settings": {
                "max_matches": 20,
                "max_suggestions": 10,
                "amount_tolerance": 0.01,
                "suggestion_counterparties": 3,
                "recent_window": 50,
                "recent_patterns": 3,
                "recent_min_confidence": 0.7,
                "recent_min_length": 4,
            },
            "fuzzy": {"threshold": 0.6},
        },
        "duplicates": {
            "tolerance_hours": 24.0,
            "description_similarity_threshold": 0.8,
            "amount_tolerance": 0.01,
        },
        "output": {
            "excel": {
                "filename_template": "reference_report_{date}_{time}.xlsx",
            },
            "sheets": {
                "summary": {"enabled": True, "name": "Summary"},
                "patterns": {"enabled": True, "name": "Reference Patterns"},
                "matches": {"enabled": True, "name": "Matches"},
                "suggestions": {"enabled": True, "name": "Suggestions"},
                "duplicates": {"enabled": True, "name": "Duplicates"},
            },
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    }


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

        # Deep merge user config into defaults
        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return ReconConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    config_dict = get_default_config()

    yaml_content = """# Reference Search and Duplicate Detection Configuration
# Generated configuration file - customize as needed

"""
    yaml_content += yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
