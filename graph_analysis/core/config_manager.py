"""
Configuration Management for graph analysis

Dataclass sections loaded from a YAML file and overridden by environment
variables. The loaded configuration is validated against a JSON schema and
cached as a module-level instance.
"""

import os
import threading
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema
import yaml

from .exceptions import ConfigurationError


CONFIG_PATH_ENV = "GRAPH_ANALYSIS_CONFIG"


@dataclass
class GraphConfig:
    """Configuration for graph construction."""
    start_node_field: str = "start_node"
    end_node_field: str = "end_node"
    orientation: str = "undirected"
    weight_field: Optional[str] = None


@dataclass
class AnalysisConfig:
    """Configuration for the centrality engine."""
    normalize: bool = True
    parallel_edge_credit: str = "merged"
    workers: int = 1
    progress_interval: int = 1000


@dataclass
class SystemConfig:
    """System-level configuration."""
    log_level: str = "INFO"
    log_file: Optional[str] = None
    console_output: bool = True


CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "graph": {
            "type": "object",
            "properties": {
                "start_node_field": {"type": "string", "minLength": 1},
                "end_node_field": {"type": "string", "minLength": 1},
                "orientation": {"type": "string", "minLength": 1},
                "weight_field": {"type": ["string", "null"]}
            },
            "additionalProperties": False
        },
        "analysis": {
            "type": "object",
            "properties": {
                "normalize": {"type": "boolean"},
                "parallel_edge_credit": {"enum": ["merged", "split"]},
                "workers": {"type": "integer", "minimum": 1},
                "progress_interval": {"type": "integer", "minimum": 1}
            },
            "additionalProperties": False
        },
        "system": {
            "type": "object",
            "properties": {
                "log_level": {"enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]},
                "log_file": {"type": ["string", "null"]},
                "console_output": {"type": "boolean"}
            },
            "additionalProperties": False
        }
    },
    "additionalProperties": False
}


class ConfigurationManager:
    """
    Configuration for graph construction, centrality analysis and logging.

    Values come from (lowest to highest priority) the dataclass defaults, the
    YAML file and ``GRAPH_ANALYSIS_*`` environment variables.
    """

    ENV_MAPPINGS = {
        'GRAPH_ANALYSIS_START_NODE_FIELD': ('graph', 'start_node_field'),
        'GRAPH_ANALYSIS_END_NODE_FIELD': ('graph', 'end_node_field'),
        'GRAPH_ANALYSIS_ORIENTATION': ('graph', 'orientation'),
        'GRAPH_ANALYSIS_WEIGHT_FIELD': ('graph', 'weight_field'),

        'GRAPH_ANALYSIS_NORMALIZE': ('analysis', 'normalize'),
        'GRAPH_ANALYSIS_PARALLEL_EDGE_CREDIT': ('analysis', 'parallel_edge_credit'),
        'GRAPH_ANALYSIS_WORKERS': ('analysis', 'workers'),
        'GRAPH_ANALYSIS_PROGRESS_INTERVAL': ('analysis', 'progress_interval'),

        'GRAPH_ANALYSIS_LOG_LEVEL': ('system', 'log_level'),
        'GRAPH_ANALYSIS_LOG_FILE': ('system', 'log_file'),
        'GRAPH_ANALYSIS_LOG_CONSOLE': ('system', 'console_output'),
    }

    def __init__(self, config_path: Optional[str] = None):
        if config_path is None:
            config_path = os.environ.get(CONFIG_PATH_ENV)
        self.config_path: Optional[Path] = Path(config_path) if config_path else None
        self.config_data: Dict[str, Any] = {}
        self.environment_vars: Dict[str, str] = {}

        self.graph: GraphConfig = GraphConfig()
        self.analysis: AnalysisConfig = AnalysisConfig()
        self.system: SystemConfig = SystemConfig()

        self._load_config()
        self._load_environment_variables()
        self._validate_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        if self.config_path is None:
            return
        if not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")
        try:
            with open(self.config_path, 'r') as f:
                self.config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to load configuration: {e}")

        if not isinstance(self.config_data, dict):
            raise ConfigurationError("Configuration file must contain a mapping at the top level")

        self._validate_against_schema(self.config_data)
        self._populate_config_objects()

    def _populate_config_objects(self) -> None:
        """Populate configuration objects from loaded data."""
        if 'graph' in self.config_data:
            self.graph = GraphConfig(**self.config_data['graph'])

        if 'analysis' in self.config_data:
            self.analysis = AnalysisConfig(**self.config_data['analysis'])

        if 'system' in self.config_data:
            self.system = SystemConfig(**self.config_data['system'])

    def _load_environment_variables(self) -> None:
        """Load configuration from environment variables."""
        for env_var, (section, key) in self.ENV_MAPPINGS.items():
            value = os.environ.get(env_var)
            if value is not None:
                self.environment_vars[env_var] = value

                config_obj = getattr(self, section)
                target_type = self._field_type(config_obj, key)
                try:
                    converted_value = self._convert_type(value, target_type)
                except ValueError:
                    raise ConfigurationError(
                        f"Environment variable {env_var}={value!r} is not a valid {target_type.__name__}"
                    )
                setattr(config_obj, key, converted_value)

    @staticmethod
    def _field_type(config_obj: Any, key: str) -> type:
        """Return the scalar type of a section field; Optional[str] fields are str."""
        for item in fields(config_obj):
            if item.name == key:
                if item.type in (bool, int, float):
                    return item.type
        return str

    def _convert_type(self, value: str, target_type: type) -> Any:
        """Convert string value to target type."""
        if target_type == bool:
            return value.lower() in ('true', '1', 'yes', 'on')
        elif target_type == int:
            return int(value)
        elif target_type == float:
            return float(value)
        else:
            return value

    def _validate_against_schema(self, data: Dict[str, Any]) -> None:
        try:
            jsonschema.validate(data, CONFIG_SCHEMA)
        except jsonschema.ValidationError as e:
            location = ".".join(str(part) for part in e.absolute_path) or "<root>"
            raise ConfigurationError(f"Configuration validation failed at {location}: {e.message}")

    def _validate_config(self) -> None:
        """Validate the merged configuration and fail fast on bad values."""
        self._validate_against_schema(self.to_dict())

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key using dot notation."""
        keys = key.split('.')

        if keys[0] == 'graph':
            obj = self.graph
        elif keys[0] == 'analysis':
            obj = self.analysis
        elif keys[0] == 'system':
            obj = self.system
        else:
            return default

        for key in keys[1:]:
            if hasattr(obj, key):
                obj = getattr(obj, key)
            else:
                return default

        return obj

    def to_dict(self) -> Dict[str, Any]:
        return {
            'graph': asdict(self.graph),
            'analysis': asdict(self.analysis),
            'system': asdict(self.system),
        }


# Global configuration instance
_config_instance: Optional[ConfigurationManager] = None
_config_lock = threading.Lock()


def get_config() -> ConfigurationManager:
    """Get global configuration instance."""
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = ConfigurationManager()
    return _config_instance


def load_config(config_path: Optional[str] = None, force_reload: bool = False) -> ConfigurationManager:
    """Load configuration from file."""
    global _config_instance
    if force_reload or _config_instance is None:
        with _config_lock:
            _config_instance = ConfigurationManager(config_path)
    return _config_instance


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() reloads it."""
    global _config_instance
    with _config_lock:
        _config_instance = None
