"""
procpipe — Canonical Exceptions (v1)

Este módulo define as exceções tipadas levantadas pelo executor de pipelines.

Objetivo:
- Modelar falhas como uma união discriminada (construção, spawn, I/O,
  decodificação, falha de estágio), em vez de uma string genérica
- Carregar dados estruturados e serializáveis em `details`
- Facilitar o mapeamento determinístico para ErrorPayload (ver `errors.py`)

Regras:
- Exceções carregam apenas dados serializáveis (int, str, listas, None).
- A mensagem é curta e humana; o diagnóstico vive em `details`.
- Nenhuma saída parcial do pipeline é anexada a uma falha.
"""

from __future__ import annotations

import signal as _signal
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Sequence


@dataclass(frozen=True, eq=False)
class PipelineError(Exception):
    """Base class para todas as falhas do executor de pipelines.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - `details["stage"]` identifica o índice do estágio quando aplicável
    - Não embedar stack trace em payloads de erro
    """

    code: ClassVar[str] = "PIPELINE_ERROR"

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message

    @property
    def stage(self) -> Optional[int]:
        """Índice do estágio associado à falha (None quando não se aplica)."""
        return self.details.get("stage")

    @property
    def program(self) -> Optional[str]:
        return self.details.get("program")

    def to_payload(self):
        from .errors import exception_to_error

        return exception_to_error(self)


# ---------------------------------------------------------------------------
# Construção
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class ConstructionError(PipelineError):
    """Pipeline vazio ou especificação de comando inválida (nenhum processo é criado)."""

    code: ClassVar[str] = "PIPELINE_CONSTRUCTION_ERROR"


# ---------------------------------------------------------------------------
# Execução
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class SpawnError(PipelineError):
    """O executável de um estágio não pôde ser iniciado."""

    code: ClassVar[str] = "PIPELINE_SPAWN_ERROR"

    @property
    def errno(self) -> Optional[int]:
        return self.details.get("errno")


@dataclass(frozen=True, eq=False)
class PipelineIOError(PipelineError):
    """Falha ao ler a saída capturada ou ao fechar uma ponta de pipe."""

    code: ClassVar[str] = "PIPELINE_IO_ERROR"

    @property
    def errno(self) -> Optional[int]:
        return self.details.get("errno")


@dataclass(frozen=True, eq=False)
class DecodeError(PipelineError):
    """Bytes capturados não são texto válido no encoding configurado."""

    code: ClassVar[str] = "PIPELINE_DECODE_ERROR"


@dataclass(frozen=True, eq=False)
class StageFailure(PipelineError):
    """Um estágio terminou com código de saída não-zero ou por sinal."""

    code: ClassVar[str] = "PIPELINE_STAGE_FAILURE"

    @property
    def returncode(self) -> Optional[int]:
        return self.details.get("returncode")

    @property
    def exit_code(self) -> Optional[int]:
        return self.details.get("exit_code")

    @property
    def signal(self) -> Optional[int]:
        return self.details.get("signal")


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def signal_name(signum: int) -> str:
    try:
        return _signal.Signals(signum).name
    except ValueError:
        return f"SIG{signum}"


def construction_error(*, reason: str, stage: Optional[int] = None) -> ConstructionError:
    details: Dict[str, Any] = {"reason": reason}
    if stage is not None:
        details["stage"] = stage
    return ConstructionError(
        message=f"Pipeline inválido: {reason}",
        details=details,
        hint="Forneça ao menos um comando, cada um com ao menos o nome do executável.",
    )


def spawn_error(*, stage: int, argv: Sequence[str], exc: Exception) -> SpawnError:
    """`exc` é o OSError do SO, ou o ValueError de argumentos recusados antes do spawn."""
    errno = getattr(exc, "errno", None)
    strerror = getattr(exc, "strerror", None)
    return SpawnError(
        message=f"Falha ao iniciar o estágio {stage} ({argv[0]}): {strerror or exc}",
        details={
            "stage": stage,
            "argv": list(argv),
            "program": argv[0],
            "errno": errno,
            "strerror": strerror,
            "exception_class": exc.__class__.__name__,
        },
        hint="Verifique se o executável existe no PATH e possui permissão de execução.",
    )


def io_error(*, stage: int, operation: str, exc: OSError) -> PipelineIOError:
    return PipelineIOError(
        message=f"Erro de I/O ({operation}) no pipe do estágio {stage}: {exc.strerror or exc}",
        details={
            "stage": stage,
            "operation": operation,
            "errno": exc.errno,
            "strerror": exc.strerror,
        },
    )


def decode_error(*, stage: int, encoding: str, exc: UnicodeDecodeError) -> DecodeError:
    return DecodeError(
        message=f"Saída do estágio {stage} não é {encoding} válido",
        details={
            "stage": stage,
            "encoding": encoding,
            "position": exc.start,
            "reason": exc.reason,
        },
        hint="Ajuste `executor.encoding` ou use PipelineResult.raw para saída binária.",
    )


def stage_failure(*, stage: int, argv: List[str], returncode: int) -> StageFailure:
    if returncode < 0:
        sig: Optional[int] = -returncode
        exit_code: Optional[int] = None
        what = f"terminado pelo sinal {sig} ({signal_name(-returncode)})"
    else:
        sig = None
        exit_code = returncode
        what = f"saiu com código {returncode}"
    return StageFailure(
        message=f"Estágio {stage} ({argv[0]}) {what}",
        details={
            "stage": stage,
            "argv": list(argv),
            "program": argv[0],
            "returncode": returncode,
            "exit_code": exit_code,
            "signal": sig,
            "signal_name": signal_name(sig) if sig is not None else None,
        },
    )
