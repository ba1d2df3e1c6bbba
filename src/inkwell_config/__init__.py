"""Inkwell configuration - typed XML configuration record with a file/environment fallback loader."""

__version__ = "0.1.0"

from inkwell_config.config import (
    LoaderSettings,
    get_config,
    load_settings,
    load_config,
    parse_config,
    read_config_env,
    read_config_file,
    reset_config,
)
from inkwell_config.exceptions import (
    ConfigError,
    ConfigFileError,
    ConfigNotFoundError,
    ConfigParseError,
)
from inkwell_config.models import (
    APIConfig,
    AuthenticationConfig,
    ContextConfig,
    DBConfig,
    DBNames,
    DBPassword,
    DBPoolConfig,
    PaginationConfig,
    ThirdPartyConfig,
    TrustedProxiesConfig,
)

__all__ = [
    "__version__",
    "LoaderSettings",
    "load_settings",
    "load_config",
    "get_config",
    "reset_config",
    "parse_config",
    "read_config_file",
    "read_config_env",
    "ConfigError",
    "ConfigFileError",
    "ConfigParseError",
    "ConfigNotFoundError",
    "APIConfig",
    "ContextConfig",
    "TrustedProxiesConfig",
    "AuthenticationConfig",
    "PaginationConfig",
    "DBConfig",
    "DBNames",
    "DBPassword",
    "DBPoolConfig",
    "ThirdPartyConfig",
]
