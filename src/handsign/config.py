"""
Configuration loading.

Reads config/config.yaml, merges it over built-in defaults and builds the
typed per-component configs.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import yaml

from .capture.camera import CameraConfig
from .detection.hand_detector import HandDetectorConfig
from .errors import ConfigError
from .recognition.gesture_classifier import GestureClassifierConfig
from .recognition.hold_tracker import HoldTrackerConfig
from .session.speech import SpeechConfig
from .utils.logger import LoggingConfig
from .utils.visualization import VisualizerConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent.parent / "config" / "config.yaml"

_SECTIONS = ("camera", "mediapipe", "recognition", "speech", "visualization", "logging")

# Section -> field -> accepted types, checked before the configs are built
_CONFIG_SCHEMA = {
    "camera": {
        "front_device_id": (int,),
        "back_device_id": (int,),
        "width": (int,),
        "height": (int,),
        "fps": (int,),
    },
    "mediapipe": {
        "min_detection_confidence": (int, float),
        "min_tracking_confidence": (int, float),
    },
    "recognition": {
        "ok_distance_threshold": (int, float),
        "hold_duration_ms": (int, float),
        "rate_window_ms": (int, float),
    },
    "speech": {
        "rate": (int,),
        "volume": (int, float),
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _normalize_sections(data: dict) -> dict:
    """Turn empty sections (``logging:`` with nothing under it) into {}."""
    normalized = dict(data)
    for section in _SECTIONS:
        values = normalized.get(section)
        if values is None:
            normalized[section] = {}
        elif not isinstance(values, dict):
            raise ConfigError(f"Section '{section}' must be a mapping")

    visualization = dict(normalized["visualization"])
    colors = visualization.get("colors")
    if colors is None:
        visualization["colors"] = {}
    elif not isinstance(colors, dict):
        raise ConfigError("visualization.colors must be a mapping")
    normalized["visualization"] = visualization
    return normalized


def _validate(data: dict) -> None:
    for section, fields in _CONFIG_SCHEMA.items():
        values = data.get(section, {})
        if not isinstance(values, dict):
            raise ConfigError(f"Section '{section}' must be a mapping")
        for name, types in fields.items():
            if name not in values:
                continue
            value = values[name]
            # bool is an int subclass but never a valid number here
            if isinstance(value, bool) or not isinstance(value, types):
                raise ConfigError(
                    f"{section}.{name} must be {' or '.join(t.__name__ for t in types)}, "
                    f"got {type(value).__name__}")

    if data.get("camera", {}).get("facing_mode", "user") not in ("user", "environment"):
        raise ConfigError("camera.facing_mode must be 'user' or 'environment'")


@dataclass
class AppConfig:
    """Application configuration container."""
    camera: CameraConfig = field(default_factory=CameraConfig)
    mediapipe: HandDetectorConfig = field(default_factory=HandDetectorConfig)
    recognition: GestureClassifierConfig = field(default_factory=GestureClassifierConfig)
    hold: HoldTrackerConfig = field(default_factory=HoldTrackerConfig)
    speech: SpeechConfig = field(default_factory=SpeechConfig)
    visualization: VisualizerConfig = field(default_factory=VisualizerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "AppConfig":
        """Create AppConfig from a parsed configuration dictionary."""
        config_dict = _normalize_sections(config_dict)
        _validate(config_dict)
        return cls(
            camera=CameraConfig.from_dict(config_dict.get("camera", {})),
            mediapipe=HandDetectorConfig.from_dict(config_dict.get("mediapipe", {})),
            recognition=GestureClassifierConfig.from_dict(config_dict.get("recognition", {})),
            hold=HoldTrackerConfig.from_dict(config_dict.get("recognition", {})),
            speech=SpeechConfig.from_dict(config_dict.get("speech", {})),
            visualization=VisualizerConfig.from_dict(config_dict.get("visualization", {})),
            logging=LoggingConfig.from_dict(config_dict.get("logging", {})),
        )


def load_config(path: Optional[Union[str, Path]] = None, overrides: Optional[dict] = None) -> AppConfig:
    """
    Load configuration from a YAML file.

    Args:
        path: Config file path. Defaults to config/config.yaml in the project root.
        overrides: Values merged on top of the file (e.g. from the command line)

    Returns:
        AppConfig with defaults for anything the file leaves out

    Raises:
        ConfigError: if the file is not valid YAML or holds invalid values
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH

    data = {}
    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded config from %s", config_path)
    except FileNotFoundError:
        logger.warning("Config file not found: %s, using defaults", config_path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the top level")

    if overrides:
        data = _deep_merge(data, overrides)

    return AppConfig.from_dict(data)
