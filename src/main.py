"""
Live detection overlay service.

Loads the detector in the background, serves the overlay/shape API, and runs
the inference loop once the viewport page enables the camera.

Usage:
    python src/main.py --config config/config.yaml

Arguments:
    --config: Path to configuration file
    --host / --port: Override the web bind address
"""

import argparse
import logging
import os
import sys
from typing import Any, Dict, Optional, Tuple

import uvicorn
import yaml

from inference.ultralytics_engine import UltralyticsEngine
from models.config import Config
from observation import create_source_from_config
from ops.logging import setup_logging
from runtime.context import build_context
from web.app import create_app

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        base_path = os.path.join(os.path.dirname(config_path), "default.yaml")
        base_cfg: Dict[str, Any] = {}
        if os.path.exists(base_path):
            with open(base_path, "r") as f:
                base_cfg = yaml.safe_load(f) or {}

        local_overrides_path = os.path.join(os.path.dirname(config_path), "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            with open(local_overrides_path, "r") as f:
                local_cfg = yaml.safe_load(f) or {}

        merged = _deep_merge(base_cfg, local_cfg)

        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            with open(config_path, "r") as f:
                explicit_cfg = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, explicit_cfg)

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['camera', 'detector', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    camera = config.get('camera', {}) or {}
    if 'device_id' not in camera:
        return False, "Missing camera.device_id"
    if not isinstance(camera['device_id'], (int, str)) or isinstance(camera['device_id'], bool):
        return False, "camera.device_id must be an integer (index) or string (URL/path)"
    if isinstance(camera['device_id'], int) and camera['device_id'] < 0:
        return False, "camera.device_id integer must be non-negative"
    if 'resolution' in camera:
        res = camera['resolution']
        if not isinstance(res, list) or len(res) != 2:
            return False, "camera.resolution must be a list of [width, height]"
        if not all(isinstance(x, int) and x > 0 for x in res):
            return False, "camera.resolution values must be positive integers"
    if 'mirrored' in camera and not isinstance(camera['mirrored'], bool):
        return False, "camera.mirrored must be true or false"

    detector = config.get('detector', {}) or {}
    if not isinstance(detector.get('model_source'), str) or not detector.get('model_source'):
        return False, "detector.model_source is required"
    if str(detector.get('execution_target', 'CPU')).upper() not in ('CPU', 'GPU'):
        return False, "detector.execution_target must be one of: CPU, GPU"
    if str(detector.get('running_mode', 'VIDEO')).upper() not in ('IMAGE', 'VIDEO'):
        return False, "detector.running_mode must be one of: IMAGE, VIDEO"
    threshold = detector.get('score_threshold', 0.5)
    if not isinstance(threshold, (int, float)) or not (0 <= threshold <= 1):
        return False, "detector.score_threshold must be between 0 and 1"

    overlay = config.get('overlay', {}) or {}
    for key in ('label_pad', 'chrome_height'):
        if key in overlay and (not isinstance(overlay[key], (int, float)) or overlay[key] < 0):
            return False, f"overlay.{key} must be a non-negative number"
    if 'refresh_hz' in overlay and (not isinstance(overlay['refresh_hz'], (int, float)) or overlay['refresh_hz'] <= 0):
        return False, "overlay.refresh_hz must be a positive number"

    editor = config.get('editor', {}) or {}
    if 'min_size' in editor and (not isinstance(editor['min_size'], (int, float)) or editor['min_size'] < 0):
        return False, "editor.min_size must be a non-negative number"
    ids = [s.get('id') for s in editor.get('shapes', []) or []]
    if any(not i for i in ids):
        return False, "editor.shapes entries need an id"
    if len(set(ids)) != len(ids):
        return False, "editor.shapes ids must be unique"

    if config['log_level'] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description='Live detection overlay')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--host', type=str, default=None,
                        help='Web bind host (overrides config)')
    parser.add_argument('--port', type=int, default=None,
                        help='Web bind port (overrides config)')
    args = parser.parse_args()

    raw_config = load_config(args.config)

    is_valid, error_msg = validate_config(raw_config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    config = Config.from_dict(raw_config)
    setup_logging(config.log_path, config.log_level)
    logging.info("Starting live detection overlay")

    ctx = build_context(
        config,
        engine_factory=UltralyticsEngine,
        source_factory=create_source_from_config,
    )
    app = create_app(ctx)

    host = args.host or config.web.host
    port = args.port or config.web.port
    logging.info(f"Web interface on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
