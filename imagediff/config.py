"""
Config Module
-------------
Centralizes configuration for the comparison tool.
Supports file-based config override and validation.

Usage:
    from imagediff.config import get_config
    config = get_config()
"""

from dataclasses import dataclass, asdict
from typing import List, Optional, Dict, Any, Tuple, Union
from pathlib import Path
import json
import logging
import math
from imagediff.logger import setup_logger

# Configure logger
logger = setup_logger("config")

# Significant digits needed to round-trip an IEEE double (std::numeric_limits<double>::max_digits10)
MAX_DIGITS10 = 17

SUPPORTED_OUTPUT_EXTENSIONS = ('.hdr', '.exr')

def _validate_config(cfg: 'Config') -> List[str]:
    """
    Validate configuration values are within acceptable ranges.

    Args:
        cfg: Configuration object to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    weights = cfg.LUMINANCE_WEIGHTS
    if not isinstance(weights, (tuple, list)) or len(weights) != 3:
        errors.append("LUMINANCE_WEIGHTS must hold exactly three values (R, G, B)")
    elif not all(isinstance(w, (int, float)) and math.isfinite(w) for w in weights):
        errors.append("LUMINANCE_WEIGHTS must be finite numbers")

    if not isinstance(cfg.REPORT_PRECISION, int) or isinstance(cfg.REPORT_PRECISION, bool) or cfg.REPORT_PRECISION < MAX_DIGITS10:
        errors.append(f"REPORT_PRECISION must be an integer >= {MAX_DIGITS10}")

    template = cfg.DIFF_FILENAME_TEMPLATE
    if not isinstance(template, str):
        errors.append("DIFF_FILENAME_TEMPLATE must be a string")
    elif '{index}' not in template:
        errors.append("DIFF_FILENAME_TEMPLATE must contain '{index}'")
    else:
        try:
            sample_name = template.format(index=1)
        except (KeyError, IndexError, ValueError, AttributeError, TypeError) as e:
            errors.append(f"DIFF_FILENAME_TEMPLATE must only use the '{{index}}' field: {e!r}")
        else:
            if Path(sample_name).suffix.lower() not in SUPPORTED_OUTPUT_EXTENSIONS:
                errors.append(f"DIFF_FILENAME_TEMPLATE must end in one of {SUPPORTED_OUTPUT_EXTENSIONS}")

    if not isinstance(cfg.OUTPUT_DIR, str):
        errors.append("OUTPUT_DIR must be a string")

    if not isinstance(cfg.LOG_LEVEL, str):
        errors.append("LOG_LEVEL must be a string")
    elif not isinstance(logging.getLevelName(cfg.LOG_LEVEL.upper()), int):
        errors.append(f"LOG_LEVEL is not a valid logging level: {cfg.LOG_LEVEL}")

    return errors

@dataclass(frozen=True)
class Config:
    """
    Configuration parameters for image comparison.

    Attributes:
        LUMINANCE_WEIGHTS: Perceptual (R, G, B) weights used to collapse a pixel to luminance.
        REPORT_PRECISION: Significant digits printed for RMSE and maxDiff values (>= 17).
        DIFF_FILENAME_TEMPLATE: Name of each difference image; '{index}' is the 1-based candidate number.
        OUTPUT_DIR: Directory difference images are written to.
        LOG_LEVEL: Console log level name.
    """

    LUMINANCE_WEIGHTS: Tuple[float, float, float] = (0.212671, 0.715160, 0.072169)
    REPORT_PRECISION: int = MAX_DIGITS10
    DIFF_FILENAME_TEMPLATE: str = "diff{index}.exr"
    OUTPUT_DIR: str = "."
    LOG_LEVEL: str = "WARNING"

    @property
    def output_dir_path(self) -> Path:
        """Return the output directory as a Path object."""
        return Path(self.OUTPUT_DIR)

    def diff_path(self, index: int) -> Path:
        """Path of the difference image for the 1-based candidate `index`."""
        return self.output_dir_path / self.DIFF_FILENAME_TEMPLATE.format(index=index)

def _load_config_from_file(path: Union[str, Path, None]) -> Optional[Dict[str, Any]]:
    """
    Load configuration from a JSON file.

    Args:
        path: Path to JSON config file

    Returns:
        Dictionary of config values or None if loading failed
    """
    if not path:
        return None

    try:
        config_path = Path(path)
        if not config_path.exists():
            logger.warning(f"Config file not found: {config_path}")
            return None

        with open(config_path, 'r') as f:
            data = json.load(f)

        if not isinstance(data, dict):
            logger.error(f"Config file must contain a JSON object: {config_path}")
            return None

        logger.info(f"Loaded configuration from {config_path}")
        return data

    except json.JSONDecodeError:
        logger.error(f"Invalid JSON in config file: {path}")
        return None
    except OSError as e:
        logger.error(f"Error loading config from {path}: {e}")
        return None

# Global config instance
_config: Optional[Config] = None

def get_config(config_path: Optional[Union[str, Path]] = None) -> Config:
    """
    Get the global configuration object, optionally loading from a file.

    Args:
        config_path: Optional path to JSON config file

    Returns:
        Configuration object with all parameters
    """
    global _config

    # If config_path provided, always reload
    if config_path is not None:
        config_data = _load_config_from_file(config_path)
        _config = Config()

        if config_data:
            # Filter out unknown fields
            base = asdict(Config())
            unknown = sorted(k for k in config_data if k not in base)
            if unknown:
                logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")
            filtered_data = {k: v for k, v in config_data.items() if k in base}
            if 'LUMINANCE_WEIGHTS' in filtered_data and isinstance(filtered_data['LUMINANCE_WEIGHTS'], list):
                filtered_data['LUMINANCE_WEIGHTS'] = tuple(filtered_data['LUMINANCE_WEIGHTS'])

            # Create new config
            try:
                new_config = Config(**filtered_data)

                # Validate config
                errors = _validate_config(new_config)
                if errors:
                    for err in errors:
                        logger.error(f"Config validation error: {err}")
                    logger.warning("Falling back to default configuration")
                else:
                    _config = new_config
                    logger.info("Configuration successfully loaded and validated")
            except Exception as e:
                logger.error(f"Error creating config from file data: {e}")
                logger.warning("Falling back to default configuration")

    # If no _config exists, create default
    if _config is None:
        _config = Config()

    return _config

def save_config(config: Config, output_path: Union[str, Path]) -> bool:
    """
    Save configuration to a JSON file.

    Args:
        config: Configuration object to save
        output_path: Path to save the config to

    Returns:
        True if saving succeeded, False otherwise
    """
    try:
        config_dict = asdict(config)
        config_dict['LUMINANCE_WEIGHTS'] = list(config_dict['LUMINANCE_WEIGHTS'])

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w') as f:
            json.dump(config_dict, f, indent=4)

        logger.info(f"Configuration saved to {output_path}")
        return True

    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")
        return False
