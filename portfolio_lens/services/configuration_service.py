"""
Configuration Service for the portfolio analytics system.
Manages YAML configuration loading, settings, and defaults.
"""

from copy import deepcopy
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional
import logging

import yaml

from ..core.mappers import BENCHMARKS, SCENARIOS, TIME_PERIODS, VOLATILITY_LEVELS
from ..logging_config import PRESETS as LOGGING_PRESETS, configure_from_settings
from ..portfolio.snapshot import AllocationSettings

logger = logging.getLogger(__name__)


class ConfigurationService:
    """
    Manages configuration loading and settings for generation and analysis.

    Provides centralized configuration management with YAML loading,
    default settings, and dynamic configuration updates.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration service.

        Args:
            config_path: Path to YAML configuration file
        """
        self.config_path = Path(config_path) if config_path else None
        self._config: Dict[str, Any] = {}
        self._defaults = self._get_default_config()

        if self.config_path and self.config_path.exists():
            self.load_config(str(self.config_path))
        else:
            logger.info("Using default configuration")
            self._config = deepcopy(self._defaults)

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration structure."""
        return {
            "generation": {
                "months": 60,
                "scenario": "normal",
                "volatility_level": "medium",
                "seed": None,
                "assumptions_path": None,
            },
            "analysis": {
                "risk_free_rate": 0.001,
                "var_confidence": 0.95,
                "default_benchmark": "Market",
                "default_period": "1Y",
                "exact_ytd": False,
                "allocation_tolerance": 0.01,
            },
            "allocations": AllocationSettings().to_dict(),
            "logging": {
                "preset": None,
                "level": None,
                "format": None,
                "file": None,
            },
        }

    def load_config(self, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Loaded configuration dictionary
        """
        config_path_obj = Path(config_path)

        if not config_path_obj.exists():
            logger.warning(f"Configuration file not found: {config_path}")
            return deepcopy(self._defaults)

        try:
            with open(config_path_obj, 'r', encoding='utf-8') as f:
                loaded_config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load configuration from {config_path}: {e}")
            return deepcopy(self._defaults)

        if not loaded_config:
            logger.warning(f"Empty configuration file: {config_path}")
            return deepcopy(self._defaults)

        # Merge with defaults (loaded config takes precedence)
        self._config = self._merge_configs(self._defaults, loaded_config)
        self.config_path = config_path_obj

        logger.info(f"Loaded configuration from {config_path}")
        return deepcopy(self._config)

    def _merge_configs(self, defaults: Dict[str, Any], loaded: Dict[str, Any]) -> Dict[str, Any]:
        """
        Recursively merge loaded config with defaults.

        Args:
            defaults: Default configuration
            loaded: Loaded configuration

        Returns:
            Merged configuration
        """
        merged = deepcopy(defaults)

        for key, value in loaded.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self._merge_configs(merged[key], value)
            else:
                merged[key] = deepcopy(value)

        return merged

    def get_generation_settings(self) -> Dict[str, Any]:
        return deepcopy(self._config.get("generation", {}))

    def get_analysis_settings(self) -> Dict[str, Any]:
        """
        Get analysis settings.

        Returns:
            Dictionary with analysis settings (risk-free rate, VaR confidence, etc.)
        """
        return deepcopy(self._config.get("analysis", {}))

    def get_allocation_settings(self) -> AllocationSettings:
        """
        Get the configured allocation split ratios.

        Raises:
            ValueError: If a configured ratio lies outside [0, 100]
        """
        return AllocationSettings.from_dict(self._config.get("allocations", {}))

    def get_logging_settings(self) -> Dict[str, Any]:
        return deepcopy(self._config.get("logging", {}))

    def apply_logging_settings(self) -> logging.Logger:
        """Configure the package logger from the ``logging`` section."""
        return configure_from_settings(self.get_logging_settings())

    @property
    def risk_free_rate(self) -> float:
        return float(self.get_setting("analysis.risk_free_rate", 0.001))

    @property
    def var_confidence(self) -> float:
        return float(self.get_setting("analysis.var_confidence", 0.95))

    @property
    def default_benchmark(self) -> str:
        return self.get_setting("analysis.default_benchmark", "Market")

    def update_setting(self, key: str, value: Any) -> bool:
        """
        Update a configuration setting using dot notation.

        Args:
            key: Setting key (supports dot notation like 'analysis.risk_free_rate')
            value: New value

        Returns:
            True if update successful, False otherwise
        """
        keys = key.split('.')
        current = self._config

        # Navigate to the parent of the target key
        for k in keys[:-1]:
            if k not in current:
                current[k] = {}
            if not isinstance(current[k], dict):
                logger.error(f"Failed to update setting {key}: '{k}' is not a section")
                return False
            current = current[k]

        current[keys[-1]] = value

        logger.info(f"Updated configuration: {key} = {value}")
        return True

    def get_setting(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration setting using dot notation.

        Args:
            key: Setting key (supports dot notation like 'analysis.default_period')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        current = self._config

        for k in key.split('.'):
            if isinstance(current, dict) and k in current:
                current = current[k]
            else:
                return default

        return current

    def save_config(self, config_path: Optional[str] = None) -> bool:
        """
        Save current configuration to YAML file.

        Args:
            config_path: Optional path to save to (uses loaded path if not provided)

        Returns:
            True if save successful, False otherwise
        """
        save_path = Path(config_path) if config_path else self.config_path

        if not save_path:
            logger.error("No save path specified and no config file loaded")
            return False

        try:
            save_path.parent.mkdir(parents=True, exist_ok=True)

            config_to_save = deepcopy(self._config)
            config_to_save["_metadata"] = {
                "saved_at": datetime.now().isoformat(),
                "version": "1.0"
            }

            with open(save_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(config_to_save, f, default_flow_style=False, indent=2, sort_keys=False)

            logger.info(f"Saved configuration to {save_path}")
            return True

        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to save configuration to {save_path}: {e}")
            return False

    def reset_to_defaults(self) -> None:
        """Reset configuration to default values."""
        self._config = deepcopy(self._defaults)
        logger.info("Reset configuration to defaults")

    def validate_config(self) -> Dict[str, Any]:
        """
        Validate current configuration.

        Returns:
            Dictionary with validation results
        """
        validation_result = {
            "valid": True,
            "errors": [],
            "warnings": []
        }

        for section in ("generation", "analysis", "allocations"):
            if section not in self._config:
                validation_result["errors"].append(f"Missing required section: {section}")

        generation = self._config.get("generation", {})
        months = generation.get("months")
        if not isinstance(months, int) or isinstance(months, bool) or months <= 0:
            validation_result["errors"].append(f"generation.months must be a positive integer, got {months!r}")
        if generation.get("scenario") not in SCENARIOS:
            validation_result["errors"].append(f"Unknown scenario: {generation.get('scenario')}")
        if generation.get("volatility_level") not in VOLATILITY_LEVELS:
            validation_result["errors"].append(f"Unknown volatility level: {generation.get('volatility_level')}")

        analysis = self._config.get("analysis", {})
        confidence = analysis.get("var_confidence")
        if not isinstance(confidence, (int, float)) or not 0 < confidence < 1:
            validation_result["errors"].append(f"analysis.var_confidence must be within (0, 1), got {confidence!r}")
        if analysis.get("default_period") not in TIME_PERIODS:
            validation_result["errors"].append(f"Unknown default period: {analysis.get('default_period')}")
        if analysis.get("default_benchmark") not in BENCHMARKS:
            validation_result["warnings"].append(
                f"Default benchmark '{analysis.get('default_benchmark')}' is not a generated benchmark"
            )

        preset = self._config.get("logging", {}).get("preset")
        if preset and preset not in LOGGING_PRESETS:
            validation_result["errors"].append(f"Unknown logging preset: {preset}")

        try:
            allocations = self.get_allocation_settings()
        except (TypeError, ValueError) as e:
            validation_result["errors"].append(f"Invalid allocations: {e}")
        else:
            validation_result["warnings"].extend(allocations.validate(analysis.get("allocation_tolerance", 0.01)))

        validation_result["valid"] = len(validation_result["errors"]) == 0

        logger.info(f"Configuration validation: {'PASS' if validation_result['valid'] else 'FAIL'}")
        return validation_result

    def update_from_dict(self, updates: Dict[str, Any]) -> bool:
        """
        Update configuration from a dictionary.

        Args:
            updates: Dictionary with configuration updates

        Returns:
            True if update successful
        """
        if not isinstance(updates, dict):
            logger.error(f"Configuration updates must be a dictionary, got {type(updates).__name__}")
            return False
        self._config = self._merge_configs(self._config, updates)
        logger.info(f"Updated configuration with {len(updates)} changes")
        return True
