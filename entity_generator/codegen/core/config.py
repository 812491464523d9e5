"""
Configuration management for code generation.

Handles loading and merging configuration from ini or JSON files,
providing defaults for packages, base classes and type mappings.
"""

import configparser
import json
import os
from copy import deepcopy
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from .schema import SuperClassRef

CONFIG_ENV_VAR = "ENTITY_GENERATOR_CONFIG"
DEFAULT_CONFIG_FILENAME = ".entitygenrc"


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""

    pass


@dataclass(frozen=True)
class FormatOptions:
    """Options handed to the Java formatter."""

    tab_width: int = 4
    print_width: int = 120
    sort_imports: bool = True

    # Extra text passes applied after layout, in order
    plugins: Tuple[Callable[[str], str], ...] = ()


@dataclass(frozen=True)
class GeneratorConfig:
    """Read-only settings for one generator run."""

    format_options: FormatOptions = field(default_factory=FormatOptions)

    # entity
    entity_package: str = "com.a1stream.domain.entity"
    simple_entity_super_class: SuperClassRef = SuperClassRef(
        "BaseEntity", "com.a1stream.common.model.BaseEntity"
    )
    partition_entity_package: str = "com.a1stream.domain.entity.partition"
    partition_entity_super_class: SuperClassRef = SuperClassRef(
        "BasePartitionEntity", "com.a1stream.common.model.BasePartitionEntity"
    )

    # entity key
    entity_key_package: str = "com.a1stream.domain.entity.partition"

    # repository
    repository_package: str = "com.a1stream.domain.repository"
    partition_repository_package: str = "com.a1stream.domain.repository.partition"
    repository_super_class: SuperClassRef = SuperClassRef(
        "JpaExtensionRepository",
        "com.ymsl.solid.jpa.repository.JpaExtensionRepository",
    )

    # vo
    vo_package: str = "com.a1stream.domain.vo"
    vo_super_class: SuperClassRef = SuperClassRef(
        "BaseVO", "com.a1stream.common.model.BaseVO"
    )
    partition_vo_package: str = "com.a1stream.domain.vo.partition"
    partition_vo_super_class: SuperClassRef = SuperClassRef(
        "BasePartitionVO", "com.a1stream.common.model.BasePartitionVO"
    )

    partition_key: str = "dealer_partition_"
    omit_columns: Tuple[str, ...] = (
        "update_author_",
        "update_date_",
        "create_author_",
        "create_date_",
        "update_program_",
        "update_counter_",
    )

    # Type handling
    fallback_type: str = "Object"
    data_type_map: Dict[str, str] = field(
        default_factory=lambda: deepcopy(DEFAULT_DATA_TYPE_MAP)
    )
    data_import_map: Dict[str, Union[str, List[str]]] = field(
        default_factory=lambda: deepcopy(DEFAULT_DATA_IMPORT_MAP)
    )
    default_value_map: Dict[str, str] = field(
        default_factory=lambda: deepcopy(DEFAULT_VALUE_MAP)
    )
    default_import_map: Dict[str, Union[str, List[str]]] = field(
        default_factory=lambda: deepcopy(DEFAULT_IMPORT_MAP)
    )
    default_vo_value_map: Dict[str, str] = field(
        default_factory=lambda: deepcopy(DEFAULT_VO_VALUE_MAP)
    )
    default_vo_import_map: Dict[str, Union[str, List[str]]] = field(
        default_factory=lambda: deepcopy(DEFAULT_VO_IMPORT_MAP)
    )

    # Expressions spliced into generated code for ambient lookups
    id_generator_expression: str = "IdUtils.getSnowflakeIdWorker()"
    id_generator_import: str = "com.ymsl.solid.base.util.IdUtils"
    partition_context_expression: str = "UserDetailsUtil.getDealerPartition()"
    partition_context_import: str = "com.a1stream.common.utils.UserDetailsUtil"

    # Output settings
    author: str = "Entity Generator G3"
    output_dir: str = "./output"


DEFAULT_DATA_TYPE_MAP: Dict[str, str] = {
    "bigint": "Long",
    "int8": "Long",
    "integer": "Integer",
    "int": "Integer",
    "int4": "Integer",
    "smallint": "Integer",
    "int2": "Integer",
    "date": "LocalDate",
    "timestamp": "Instant",
    "timestamptz": "Instant",
    "time": "LocalTime",
    "timetz": "LocalTime",
    "numeric": "BigDecimal",
    "decimal": "BigDecimal",
    "character varying": "String",
    "varchar": "String",
    "character": "String",
    "char": "String",
    "text": "String",
    "boolean": "Boolean",
    "bool": "Boolean",
    "bytea": "byte[]",
    "jsonb": "String",
    "json": "String",
    "bpchar": "String",
}

_JSON_IMPORTS = [
    "org.hibernate.annotations.Type",
    "com.ymsl.solid.jpa.usertype.StringJsonUserType",
]

DEFAULT_DATA_IMPORT_MAP: Dict[str, Union[str, List[str]]] = {
    "numeric": "java.math.BigDecimal",
    "decimal": "java.math.BigDecimal",
    "timestamptz": "java.time.Instant",
    "timestamp": "java.time.Instant",
    "time": "java.time.LocalTime",
    "timetz": "java.time.LocalTime",
    "date": "java.time.LocalDate",
    "jsonb": list(_JSON_IMPORTS),
    "json": list(_JSON_IMPORTS),
}

DEFAULT_VALUE_MAP: Dict[str, str] = {
    "numeric": "BigDecimal.ZERO",
    "decimal": "BigDecimal.ZERO",
}

DEFAULT_IMPORT_MAP: Dict[str, Union[str, List[str]]] = {
    "numeric": "java.math.BigDecimal",
    "decimal": "java.math.BigDecimal",
}

_COMMON_CONSTANTS = "com.a1stream.common.constants.CommonConstants"

DEFAULT_VO_IMPORT_MAP: Dict[str, Union[str, List[str]]] = {
    "integer": _COMMON_CONSTANTS,
    "int": _COMMON_CONSTANTS,
    "int4": _COMMON_CONSTANTS,
    "smallint": _COMMON_CONSTANTS,
    "int2": _COMMON_CONSTANTS,
    "numeric": "java.math.BigDecimal",
    "decimal": "java.math.BigDecimal",
    "timestamptz": "java.time.Instant",
    "timestamp": "java.time.Instant",
    "time": "java.time.LocalTime",
    "timetz": "java.time.LocalTime",
    "date": "java.time.LocalDate",
}

DEFAULT_VO_VALUE_MAP: Dict[str, str] = {
    "integer": "CommonConstants.INTEGER_ZERO",
    "int": "CommonConstants.INTEGER_ZERO",
    "int4": "CommonConstants.INTEGER_ZERO",
    "smallint": "CommonConstants.INTEGER_ZERO",
    "int2": "CommonConstants.INTEGER_ZERO",
    "numeric": "BigDecimal.ZERO",
    "decimal": "BigDecimal.ZERO",
}

_SUPER_CLASS_FIELDS = {
    "simple_entity_super_class",
    "partition_entity_super_class",
    "repository_super_class",
    "vo_super_class",
    "partition_vo_super_class",
}

_MAP_FIELDS = {
    "data_type_map",
    "data_import_map",
    "default_value_map",
    "default_import_map",
    "default_vo_value_map",
    "default_vo_import_map",
}

_MULTI_VALUE_MAPS = _MAP_FIELDS - {
    "data_type_map",
    "default_value_map",
    "default_vo_value_map",
}

_FORMAT_FIELDS = {"tab_width", "print_width", "sort_imports"}


def default_config_path() -> Path:
    """Config file location: $ENTITY_GENERATOR_CONFIG or ~/.entitygenrc."""
    custom = os.environ.get(CONFIG_ENV_VAR)
    if custom:
        return Path(custom).expanduser()
    return Path.home() / DEFAULT_CONFIG_FILENAME


class ConfigManager:
    """Manages configuration loading and merging."""

    def __init__(self):
        """Initialize configuration manager."""
        self._defaults: Dict[str, Any] = config_to_dict(GeneratorConfig())

    def get_config(
        self,
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
    ) -> GeneratorConfig:
        """
        Get the complete configuration.

        Args:
            custom_config: Custom configuration overrides
            config_file: Path to an ini or JSON configuration file

        Returns:
            Defaults merged with the file and then the custom overrides
        """
        merged = deepcopy(self._defaults)

        if config_file:
            self._merge(merged, self._load_config_file(config_file))

        if custom_config:
            self._merge(merged, custom_config)

        return self._dict_to_config(merged)

    def _merge(self, base: Dict[str, Any], overrides: Dict[str, Any]):
        """Merge overrides into base; maps and sections merge key-wise."""
        for key, value in overrides.items():
            if key in _FORMAT_FIELDS:
                base["format_options"][key] = value
            elif isinstance(value, dict) and isinstance(base.get(key), dict):
                base[key].update(value)
            else:
                base[key] = value

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from an ini or JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if path.suffix.lower() == ".json":
            return self._load_json_file(path)
        return self._load_ini_file(path)

    def _load_json_file(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {e}")
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {e}")

        if not isinstance(config, dict):
            raise ConfigError(
                f"Configuration file must contain a JSON object: {path}"
            )
        return config

    def _load_ini_file(self, path: Path) -> Dict[str, Any]:
        parser = configparser.ConfigParser(interpolation=None)
        # Keep the case of keys such as "character varying"
        parser.optionxform = str

        try:
            with open(path, "r", encoding="utf-8") as f:
                parser.read_file(f)
        except configparser.Error as e:
            raise ConfigError(f"Invalid ini in configuration file {path}: {e}")
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {e}")

        config: Dict[str, Any] = {}
        for section in parser.sections():
            values = dict(parser.items(section))
            if section in ("generator", "format"):
                config.update(values)
            elif section in _MULTI_VALUE_MAPS:
                config[section] = {
                    key: _split_list(value) if "," in value else value
                    for key, value in values.items()
                }
            else:
                config[section] = values
        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Convert dictionary to GeneratorConfig instance."""
        known_fields = {f.name for f in fields(GeneratorConfig)}
        unknown = sorted(set(config_dict) - known_fields - _FORMAT_FIELDS)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        args: Dict[str, Any] = {}
        try:
            for key, value in config_dict.items():
                if key == "format_options":
                    args[key] = _to_format_options(value)
                elif key in _SUPER_CLASS_FIELDS:
                    args[key] = _to_super_class(key, value)
                elif key == "omit_columns":
                    args[key] = tuple(
                        _split_list(value) if isinstance(value, str) else value
                    )
                elif key in _MAP_FIELDS:
                    if not isinstance(value, dict):
                        raise ConfigError(f"{key} must be a mapping")
                    args[key] = dict(value)
                else:
                    args[key] = value
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e

        return GeneratorConfig(**args)

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Save configuration to an ini file (or JSON when the suffix says so)."""
        path = Path(output_path)
        config_dict = config_to_dict(config)

        try:
            with open(path, "w", encoding="utf-8") as f:
                if path.suffix.lower() == ".json":
                    json.dump(config_dict, f, indent=2, ensure_ascii=False)
                else:
                    _to_ini(config_dict).write(f)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}")


def config_to_dict(config: GeneratorConfig) -> Dict[str, Any]:
    """Plain-data view of a config (plugins are not serializable and are dropped)."""
    data = asdict(config)
    data["format_options"].pop("plugins", None)
    data["omit_columns"] = list(config.omit_columns)
    return data


def _to_ini(config_dict: Dict[str, Any]) -> configparser.ConfigParser:
    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str

    parser["generator"] = {}
    for key, value in config_dict.items():
        if key == "format_options":
            parser["format"] = {k: str(v) for k, v in value.items()}
        elif isinstance(value, dict):
            parser[key] = {
                k: ", ".join(v) if isinstance(v, list) else str(v)
                for k, v in value.items()
            }
        elif isinstance(value, list):
            parser["generator"][key] = ", ".join(value)
        else:
            parser["generator"][key] = str(value)
    return parser


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _to_format_options(value: Any) -> FormatOptions:
    if isinstance(value, FormatOptions):
        return value
    return FormatOptions(
        tab_width=int(value.get("tab_width", 4)),
        print_width=int(value.get("print_width", 120)),
        sort_imports=_to_bool(value.get("sort_imports", True)),
        plugins=tuple(value.get("plugins", ())),
    )


def _to_super_class(key: str, value: Any) -> SuperClassRef:
    if isinstance(value, SuperClassRef):
        return value
    if not isinstance(value, dict) or not value.get("name"):
        raise ConfigError(f"{key} needs a 'name' and a 'package'")
    return SuperClassRef(name=value["name"], package=value.get("package", ""))


# Global configuration manager instance
_config_manager = None
_config: Optional[GeneratorConfig] = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(
    custom_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[Union[str, Path]] = None,
) -> GeneratorConfig:
    """
    Convenience function to load configuration.

    Args:
        custom_config: Custom configuration overrides
        config_file: Path to an ini or JSON configuration file

    Returns:
        Merged configuration
    """
    manager = get_config_manager()
    return manager.get_config(custom_config, config_file)


def get_config() -> GeneratorConfig:
    """
    Process-wide configuration, loaded on first access and cached.

    Reads the file at default_config_path() when it exists.
    """
    global _config
    if _config is None:
        path = default_config_path()
        _config = load_config(config_file=path if path.exists() else None)
    return _config


def reset_config():
    """Forget the cached configuration (used by tests and the CLI)."""
    global _config
    _config = None


def init_config_file(path: Optional[Union[str, Path]] = None) -> Path:
    """
    Write the default configuration to disk unless a file already exists.

    Returns:
        The path of the (existing or new) configuration file
    """
    target = Path(path) if path else default_config_path()
    if not target.exists():
        get_config_manager().save_config(GeneratorConfig(), target)
    return target
