# core/config.py

"""Configuration management."""
import json
from pathlib import Path
from typing import Optional


class Config:
    """User defaults for the pack tool, persisted as JSON."""

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = config_file or Path.home() / '.packtool_config.json'
        self.default_config = {
            'language': None,
            'default_version': 0,
            'default_mountpoint': 'data\\',
            'extract_dir': '.',
            'timezone_offset': 32400,
            'compression_level': 9,
            'show_progress': True,
        }
        self.config = self.load_config()

    def load_config(self) -> dict:
        """Load configuration from file."""
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    loaded = json.load(f)
                if isinstance(loaded, dict):
                    # Merge with defaults
                    config = self.default_config.copy()
                    config.update(loaded)
                    return config
            except (OSError, ValueError):
                pass
        return self.default_config.copy()

    def save_config(self) -> bool:
        """Save configuration to file."""
        try:
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(self.config, f, indent=2, ensure_ascii=False)
            return True
        except OSError:
            return False

    def get(self, key: str, default=None):
        """Get configuration value."""
        return self.config.get(key, default)

    def set(self, key: str, value):
        """Set configuration value."""
        self.config[key] = value
