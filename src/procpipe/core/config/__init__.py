# src/procpipe/core/config/__init__.py
"""
Camada de configuração do procpipe.

Este pacote lê, sobrepõe em camadas e valida as opções do executor.

A configuração no procpipe é:
    - declarativa (YAML ou JSON)
    - determinística
    - opcional: sem arquivos, os defaults embutidos são usados

Componentes:
    - loader  → `load_config`, `apply_layer`, `DEFAULT_CONFIG`
    - options → `ExecutorOptions` (com `fingerprint`), `load_options`
    - errors  → hierarquia `ConfigError`

Limites explícitos:
    - Não executa pipeline
    - Não interpreta sintaxe de shell
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidOptionError,
    UnknownConfigKeyError,
    UnsupportedConfigFormatError,
)
from .loader import DEFAULT_CONFIG, apply_layer, load_config
from .options import ExecutorOptions, load_options

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidOptionError",
    "UnknownConfigKeyError",
    "UnsupportedConfigFormatError",
    "DEFAULT_CONFIG",
    "apply_layer",
    "load_config",
    "ExecutorOptions",
    "load_options",
]
