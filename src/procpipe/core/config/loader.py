# src/procpipe/core/config/loader.py
"""
Resolução da configuração do executor a partir de arquivos.

A configuração do procpipe tem um schema fixo de duas seções:

    executor:      stdin, stderr, encoding, strip_trailing_newline, cwd, env
    traceability:  record_path

A resolução parte de `DEFAULT_CONFIG` e aplica, em ordem, as camadas
informadas (arquivo de defaults do projeto, depois arquivo local). Cada
camada é sobreposta **chave a chave dentro de cada seção**:

    - seção ausente ou `null` → a camada não altera a seção
    - chave presente          → substitui o valor anterior por inteiro
      (inclusive `env`: o mapa da camada substitui o anterior, sem mistura)
    - seção ou chave fora do schema → `UnknownConfigKeyError`
    - seção que não é um mapa       → `ConfigTypeConflictError`

Invariantes:
    - O resultado sempre contém exatamente as seções e chaves do schema
    - `DEFAULT_CONFIG` e as camadas lidas nunca são mutados
    - A validação dos valores fica com `ExecutorOptions`

Limites explícitos:
    - Não executa pipeline
    - Não expande variáveis de ambiente nem caminhos
"""

from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional
import json

import yaml  # PyYAML

from .errors import (
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnknownConfigKeyError,
    UnsupportedConfigFormatError,
)


DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "executor": {
        "stdin": "inherit",
        "stderr": "inherit",
        "encoding": "utf-8",
        "strip_trailing_newline": True,
        "cwd": None,
        "env": None,
    },
    "traceability": {
        "record_path": None,
    },
}

_READERS = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.load,
}


def reject_unknown_keys(
    where: str, keys: Iterable[str], allowed: Iterable[str], *, source: Optional[str] = None
) -> None:
    """Levanta `UnknownConfigKeyError` se `keys` contiver algo fora de `allowed`."""
    unknown = sorted(set(keys) - set(allowed))
    if unknown:
        origin = f" ({source})" if source else ""
        raise UnknownConfigKeyError(
            f"Chaves desconhecidas em {where}{origin}: {unknown}; "
            f"aceitas: {sorted(allowed)}"
        )


def _read_layer(path: Path) -> Dict[str, Any]:
    """
    Lê uma camada de configuração (YAML ou JSON).

    Um arquivo vazio é uma camada vazia.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se a extensão não for .yaml, .yml ou .json.
        InvalidConfigRootTypeError: Se a raiz do documento não for um mapa.
    """
    if not path.exists():
        raise DefaultsNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    reader = _READERS.get(path.suffix.lower())
    if reader is None:
        raise UnsupportedConfigFormatError(
            f"Formato não suportado: {path.suffix or '(sem extensão)'} em {path}"
        )

    with path.open("r", encoding="utf-8") as f:
        layer = reader(f)

    if layer is None:
        return {}
    if not isinstance(layer, dict):
        raise InvalidConfigRootTypeError(
            f"A raiz de {path} deve ser um mapa de seções, recebido: {type(layer).__name__}"
        )
    return layer


def apply_layer(
    effective: Mapping[str, Mapping[str, Any]],
    layer: Mapping[str, Any],
    *,
    source: Optional[str] = None,
) -> Dict[str, Dict[str, Any]]:
    """
    Sobrepõe uma camada à configuração efetiva, seção a seção.

    Args:
        effective: Configuração já resolvida (mesmo formato de `DEFAULT_CONFIG`).
        layer: Conteúdo de uma camada (ex.: arquivo local).
        source: Origem da camada, usada nas mensagens de erro.

    Returns:
        Nova configuração efetiva; nenhum argumento é mutado.

    Raises:
        UnknownConfigKeyError: Seção ou chave fora do schema.
        ConfigTypeConflictError: Seção que não é um mapa.
    """
    reject_unknown_keys("a raiz", layer, DEFAULT_CONFIG, source=source)

    resolved = deepcopy(dict(effective))
    for section, values in layer.items():
        if values is None:
            continue
        if not isinstance(values, Mapping):
            origin = f" ({source})" if source else ""
            raise ConfigTypeConflictError(
                f"A seção '{section}'{origin} deve ser um mapa, recebido: {type(values).__name__}"
            )
        reject_unknown_keys(section, values, DEFAULT_CONFIG[section], source=source)

        merged = dict(resolved[section])
        merged.update(deepcopy(dict(values)))
        resolved[section] = merged
    return resolved


def load_config(
    *,
    defaults_path: Optional[str] = None,
    local_path: Optional[str] = None,
) -> Dict[str, Dict[str, Any]]:
    """
    Resolve a configuração efetiva do executor.

    Ordem de precedência (da menor para a maior):
        1. `DEFAULT_CONFIG`
        2. `defaults_path`, obrigatório quando informado
        3. `local_path`, ignorado quando o arquivo não existe

    Raises:
        DefaultsNotFoundError: Se `defaults_path` for informado e não existir.
        UnsupportedConfigFormatError, InvalidConfigRootTypeError: Arquivo malformado.
        UnknownConfigKeyError, ConfigTypeConflictError: Camada fora do schema.
    """
    effective = deepcopy(DEFAULT_CONFIG)

    if defaults_path is not None:
        path = Path(defaults_path)
        effective = apply_layer(effective, _read_layer(path), source=str(path))

    if local_path is not None:
        path = Path(local_path)
        if path.exists():
            effective = apply_layer(effective, _read_layer(path), source=str(path))

    return effective
