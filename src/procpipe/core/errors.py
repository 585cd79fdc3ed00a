"""
procpipe — Canonical Error Structures (v1)

Este módulo define o payload canônico de erros do procpipe.
Erros são tratados como parte do contrato operacional da biblioteca,
devendo ser:

- explícitos
- serializáveis
- acionáveis

Nenhuma falha é convertida silenciosamente em sucesso.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .exceptions import PipelineError


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro do procpipe.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao chamador
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

PIPELINE_CONSTRUCTION_ERROR = "PIPELINE_CONSTRUCTION_ERROR"
PIPELINE_SPAWN_ERROR = "PIPELINE_SPAWN_ERROR"
PIPELINE_IO_ERROR = "PIPELINE_IO_ERROR"
PIPELINE_DECODE_ERROR = "PIPELINE_DECODE_ERROR"
PIPELINE_STAGE_FAILURE = "PIPELINE_STAGE_FAILURE"

# Fallback para exceções fora da hierarquia PipelineError
PIPELINE_UNEXPECTED_ERROR = "PIPELINE_UNEXPECTED_ERROR"


def exception_to_error(exc: BaseException) -> ErrorPayload:
    """Converte exceções em ErrorPayload (serializável, acionável).

    Regras:
    - PipelineError: já vem com message/details/hint; o tipo é o `code` da classe.
    - Outras exceções: encapsular como PIPELINE_UNEXPECTED_ERROR sem expor stack trace.
    """
    if isinstance(exc, PipelineError):
        return ErrorPayload(
            type=exc.code,
            message=exc.message or "Erro de execução do pipeline",
            details=dict(exc.details or {}),
            hint=exc.hint,
        )

    return ErrorPayload(
        type=PIPELINE_UNEXPECTED_ERROR,
        message=str(exc) or "Erro inesperado durante execução do pipeline",
        details={"exception_class": exc.__class__.__name__},
        hint="Verifique os eventos do RunContext e o registro da execução.",
    )
