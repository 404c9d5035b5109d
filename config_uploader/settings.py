#!/usr/bin/env python3
"""
Settings Manager for the config uploader
Loads the optional per-project YAML settings file (.config-uploader.yaml)
"""

import os
import copy
import yaml
from pathlib import Path
from typing import Dict, List, Optional, Any

from .log_manager import get_logger


class SettingsManager:
    """Loads uploader settings and merges them over the defaults"""

    DEFAULT_SETTINGS = {
        "version": "1.0",
        "slot_settings": {
            # Keys conventionally pinned to a slot
            "defaults": ["NODE_ENV", "MONGODB_URI", "API_KEY"],
        },
        "environments": {
            # Offered as new slots when they are not live yet
            "suggested": ["staging", "development"],
        },
    }

    def __init__(self, settings_path: Optional[Path] = None):
        """
        Initialize settings manager

        Args:
            settings_path: Path to the YAML file (a missing file means defaults)
        """
        self.settings_path = Path(settings_path) if settings_path else None
        self.logger = get_logger('SettingsManager', component='manager')
        self._cache = None
        self._cache_mtime = None

    def load_settings(self, force_reload: bool = False) -> Dict[str, Any]:
        """
        Load settings from YAML with caching

        Args:
            force_reload: Force reload even if cached

        Returns:
            Settings dictionary, always containing every default key
        """
        if self.settings_path is None or not self.settings_path.exists():
            return copy.deepcopy(self.DEFAULT_SETTINGS)

        if not force_reload and self._cache is not None:
            try:
                if os.path.getmtime(self.settings_path) == self._cache_mtime:
                    return self._cache
            except OSError:
                pass

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
            if not isinstance(loaded, dict):
                raise ValueError("top level must be a mapping")
        except (OSError, ValueError, yaml.YAMLError) as e:
            self.logger.error(f"Error loading settings from {self.settings_path}: {e}")
            return copy.deepcopy(self.DEFAULT_SETTINGS)

        settings = self._merge_with_defaults(loaded)
        self._cache = settings
        self._cache_mtime = os.path.getmtime(self.settings_path)
        self.logger.debug(f"Loaded settings from {self.settings_path}")
        return settings

    def get_default_slot_settings(self) -> List[str]:
        """Default candidate keys for slot-sticky settings"""
        return list(self.load_settings()["slot_settings"]["defaults"])

    def get_suggested_environments(self) -> List[str]:
        """Slot names offered for creation when not live yet"""
        return list(self.load_settings()["environments"]["suggested"])

    def _merge_with_defaults(self, loaded: Dict) -> Dict:
        """
        Merge loaded settings with defaults to ensure all keys exist

        Args:
            loaded: Parsed YAML mapping

        Returns:
            Merged settings
        """
        merged = copy.deepcopy(self.DEFAULT_SETTINGS)

        if "version" in loaded:
            merged["version"] = str(loaded["version"])

        for section, key in (("slot_settings", "defaults"), ("environments", "suggested")):
            block = loaded.get(section)
            value = block.get(key) if isinstance(block, dict) else None
            if value is None:
                continue
            if isinstance(value, list) and all(isinstance(v, str) for v in value):
                merged[section][key] = [v.strip() for v in value if v.strip()]
            else:
                self.logger.warning(f"Ignoring {section}.{key}: expected a list of strings")

        return merged

    def validate_settings(self) -> tuple:
        """
        Validate settings structure

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []
        if self.settings_path is None or not self.settings_path.exists():
            return (True, errors)

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            return (False, [f"Failed to load settings: {e}"])

        if not isinstance(loaded, dict):
            return (False, ["Settings file must be a YAML mapping"])

        for section, key in (("slot_settings", "defaults"), ("environments", "suggested")):
            block = loaded.get(section)
            if block is None:
                continue
            if not isinstance(block, dict):
                errors.append(f"'{section}' must be a mapping")
                continue
            value = block.get(key)
            if value is not None and not (isinstance(value, list) and all(isinstance(v, str) for v in value)):
                errors.append(f"'{section}.{key}' must be a list of strings")

        return (len(errors) == 0, errors)
