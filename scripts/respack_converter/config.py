"""
Configuration management for the respack converter.
Supports TOML and JSON configuration files with environment overrides.
"""

import os
import json
import tomllib
from dataclasses import dataclass
from typing import Dict, List, Any, Union
from pathlib import Path


DEFAULT_MANIFEST_URL = "https://pgres4pt.realtvop.top"

ENV_PREFIX = "RESPACK_"

# Environment variable -> (attribute, type)
ENV_OVERRIDES = {
    "RESPACK_OUTPUT_ROOT": ("output_root", str),
    "RESPACK_DESCRIPTOR_FILENAME": ("descriptor_filename", str),
    "RESPACK_COMPRESSION_LEVEL": ("compression_level", int),
    "RESPACK_MANIFEST_URL": ("manifest_url", str),
    "RESPACK_PROVIDER": ("provider", str),
    "RESPACK_REQUEST_TIMEOUT": ("request_timeout", float),
    "RESPACK_MAX_WORKERS": ("max_workers", int),
    "RESPACK_USER_AGENT": ("user_agent", str),
    "RESPACK_STRICT_HIT_EFFECT_FRAMES": ("strict_hit_effect_frames", bool),
    "RESPACK_STRICT_ATLAS_CONSISTENCY": ("strict_atlas_consistency", bool),
    "RESPACK_LOG_LEVEL": ("log_level", str),
}


@dataclass
class ConverterConfig:
    """Main configuration class for the converter."""

    # Output settings
    output_root: str = "output"
    descriptor_filename: str = "info.yml"
    compression_level: int = 6

    # Network settings
    manifest_url: str = DEFAULT_MANIFEST_URL
    provider: str = "http"
    request_timeout: float = 30.0
    max_workers: int = 4
    user_agent: str = ""

    # Processing settings
    strict_hit_effect_frames: bool = True
    strict_atlas_consistency: bool = False

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "ConverterConfig":
        """Load configuration from TOML or JSON file."""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if config_path.suffix.lower() == '.toml':
            with open(config_path, 'rb') as f:
                data = tomllib.load(f)
        elif config_path.suffix.lower() == '.json':
            with open(config_path, 'r') as f:
                data = json.load(f)
        else:
            raise ValueError(f"Unsupported configuration format: {config_path.suffix}")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "ConverterConfig":
        """Create configuration from dictionary."""
        config_data = {}

        if 'output' in data:
            output = data['output']
            config_data['output_root'] = output.get('output_root', 'output')
            config_data['descriptor_filename'] = output.get('descriptor_filename', 'info.yml')
            config_data['compression_level'] = output.get('compression_level', 6)

        if 'network' in data:
            network = data['network']
            config_data['manifest_url'] = network.get('manifest_url', DEFAULT_MANIFEST_URL)
            config_data['provider'] = network.get('provider', 'http')
            config_data['request_timeout'] = network.get('request_timeout', 30.0)
            config_data['max_workers'] = network.get('max_workers', 4)
            config_data['user_agent'] = network.get('user_agent', '')

        if 'processing' in data:
            processing = data['processing']
            config_data['strict_hit_effect_frames'] = processing.get('strict_hit_effect_frames', True)
            config_data['strict_atlas_consistency'] = processing.get('strict_atlas_consistency', False)

        if 'logging' in data:
            config_data['log_level'] = data['logging'].get('level', 'INFO')

        return cls(**config_data)

    @classmethod
    def default(cls) -> "ConverterConfig":
        """Create default configuration with environment variable overrides."""
        return cls._apply_env_overrides(cls())

    @classmethod
    def _apply_env_overrides(cls, config: "ConverterConfig") -> "ConverterConfig":
        """Apply environment variable overrides to configuration."""
        for env_name, (attribute, kind) in ENV_OVERRIDES.items():
            raw = os.getenv(env_name)
            if not raw:
                continue
            if kind is bool:
                value = raw.lower() in ('1', 'true', 'yes', 'on')
            else:
                value = kind(raw)
            setattr(config, attribute, value)

        return config

    def provider_config(self) -> Dict[str, Any]:
        """Settings handed to the resource provider."""
        return {
            "timeout": self.request_timeout,
            "max_workers": self.max_workers,
            "user_agent": self.user_agent,
        }

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.output_root:
            errors.append("output_root must not be empty")

        if not self.descriptor_filename or Path(self.descriptor_filename).name != self.descriptor_filename:
            errors.append("descriptor_filename must be a plain file name")

        if not 0 <= self.compression_level <= 9:
            errors.append("compression_level must be between 0 and 9")

        if self.request_timeout <= 0:
            errors.append("request_timeout must be positive")

        if self.max_workers < 1:
            errors.append("max_workers must be at least 1")

        if self.log_level.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            errors.append("log_level must be DEBUG, INFO, WARNING, ERROR or CRITICAL")

        return errors
