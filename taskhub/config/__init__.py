from .loader import load_hub, parse_strategy
from .types import (
    BuiltinStrategy,
    ConfigError,
    CustomStrategy,
    DependencyFn,
    GroupConfig,
    HubConfig,
    ImportedStrategy,
    StrategyRef,
    UnsupportedConfigFormatError,
)

__all__ = [
    "load_hub",
    "parse_strategy",
    "HubConfig",
    "GroupConfig",
    "StrategyRef",
    "BuiltinStrategy",
    "ImportedStrategy",
    "CustomStrategy",
    "DependencyFn",
    "ConfigError",
    "UnsupportedConfigFormatError",
]
