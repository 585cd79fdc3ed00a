# src/procpipe/core/config/options.py
"""
Opções tipadas do executor de pipelines.

Este módulo converte a configuração resolvida (dict) em um objeto
imutável e validado, consumido pelo executor.

Chaves reconhecidas (v1):
    - executor.stdin                  → "inherit" | "null" (somente estágio 0)
    - executor.stderr                 → "inherit" | "null" (todos os estágios)
    - executor.encoding               → codec usado para decodificar a saída
    - executor.strip_trailing_newline → remove um único terminador de linha final
    - executor.cwd                    → diretório de trabalho repassado aos processos
    - executor.env                    → ambiente repassado aos processos (substitui os.environ)
    - traceability.record_path        → caminho do RunRecord em JSON (opcional)

Invariantes:
    - Valores inválidos são rejeitados com `InvalidOptionError`
    - `from_config(opts.to_config())` reproduz as mesmas opções
    - Seções ou chaves fora do schema são rejeitadas com `UnknownConfigKeyError`
    - `fingerprint()` identifica as opções no RunRecord
"""

from __future__ import annotations

import codecs
import hashlib
import json
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .errors import InvalidOptionError
from .loader import DEFAULT_CONFIG, apply_layer, load_config

INHERIT = "inherit"
NULL = "null"

_STREAM_POLICIES = (INHERIT, NULL)


@dataclass(frozen=True)
class ExecutorOptions:
    """
    Opções efetivas de uma execução de pipeline.

    Decisões arquiteturais:
        - stderr é herdado por padrão (passa direto para o stderr do chamador)
        - stdin do estágio 0 é herdado por padrão; nunca é produzido pelo executor
        - `env` e `cwd` são repassados sem interpretação
    """

    stdin: str = INHERIT
    stderr: str = INHERIT
    encoding: str = "utf-8"
    strip_trailing_newline: bool = True
    cwd: Optional[str] = None
    env: Optional[Mapping[str, str]] = None
    record_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.stdin not in _STREAM_POLICIES:
            raise InvalidOptionError(
                f"executor.stdin deve ser um de {_STREAM_POLICIES}, recebido: {self.stdin!r}"
            )
        if self.stderr not in _STREAM_POLICIES:
            raise InvalidOptionError(
                f"executor.stderr deve ser um de {_STREAM_POLICIES}, recebido: {self.stderr!r}"
            )
        if not isinstance(self.encoding, str):
            raise InvalidOptionError("executor.encoding deve ser string")
        try:
            codecs.lookup(self.encoding)
        except LookupError as e:
            raise InvalidOptionError(f"Encoding desconhecido: {self.encoding!r}") from e
        if not isinstance(self.strip_trailing_newline, bool):
            raise InvalidOptionError("executor.strip_trailing_newline deve ser bool")
        if self.cwd is not None:
            if not isinstance(self.cwd, str):
                raise InvalidOptionError("executor.cwd deve ser string ou null")
            if "\x00" in self.cwd:
                raise InvalidOptionError("executor.cwd contém byte NUL")
        if self.env is not None:
            if not isinstance(self.env, Mapping):
                raise InvalidOptionError("executor.env deve ser um mapa ou null")
            for k, v in self.env.items():
                if not isinstance(k, str) or not isinstance(v, str):
                    raise InvalidOptionError(
                        f"executor.env aceita apenas strings, recebido: {k!r}={v!r}"
                    )
                # o SO separa nome e valor no primeiro "="
                if not k or "=" in k or "\x00" in k:
                    raise InvalidOptionError(f"executor.env: nome de variável inválido: {k!r}")
                if "\x00" in v:
                    raise InvalidOptionError(f"executor.env: valor de {k} contém byte NUL")
        if self.record_path is not None and not isinstance(self.record_path, str):
            raise InvalidOptionError("traceability.record_path deve ser string ou null")

    @classmethod
    def from_config(cls, config: Optional[Mapping[str, Any]]) -> "ExecutorOptions":
        """
        Constrói opções a partir de uma configuração (ver `load_config`).

        Seções ou chaves ausentes assumem os valores de `DEFAULT_CONFIG`;
        seções ou chaves fora do schema levantam `UnknownConfigKeyError`.
        """
        resolved = apply_layer(DEFAULT_CONFIG, config or {})
        executor_cfg = resolved["executor"]
        env = executor_cfg["env"]
        return cls(
            stdin=executor_cfg["stdin"],
            stderr=executor_cfg["stderr"],
            encoding=executor_cfg["encoding"],
            strip_trailing_newline=executor_cfg["strip_trailing_newline"],
            cwd=executor_cfg["cwd"],
            env=dict(env) if isinstance(env, Mapping) else env,
            record_path=resolved["traceability"]["record_path"],
        )

    def to_config(self) -> Dict[str, Any]:
        return {
            "executor": {
                "stdin": self.stdin,
                "stderr": self.stderr,
                "encoding": self.encoding,
                "strip_trailing_newline": self.strip_trailing_newline,
                "cwd": self.cwd,
                "env": dict(self.env) if self.env is not None else None,
            },
            "traceability": {
                "record_path": self.record_path,
            },
        }

    def fingerprint(self) -> str:
        """
        Identidade das opções: SHA-256 do JSON canônico de `to_config()`.

        Gravada no RunRecord (`inputs.config_hash`) para comparar execuções
        feitas com as mesmas opções. Independe da ordem das chaves de `env`.
        """
        canonical = json.dumps(
            self.to_config(), sort_keys=True, separators=(",", ":"), ensure_ascii=False
        )
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def load_options(
    *,
    defaults_path: Optional[str] = None,
    local_path: Optional[str] = None,
) -> ExecutorOptions:
    """Carrega a configuração (defaults + local) e a converte em `ExecutorOptions`."""
    return ExecutorOptions.from_config(
        load_config(defaults_path=defaults_path, local_path=local_path)
    )
