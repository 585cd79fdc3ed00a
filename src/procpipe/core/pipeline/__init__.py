# src/procpipe/core/pipeline/__init__.py
"""
# Pipeline Core — procpipe

Este pacote define as **estruturas fundamentais** que descrevem um
pipeline de comandos e o seu resultado.

Um pipeline é modelado como uma **sequência linear e não vazia de
comandos**, onde a saída padrão de cada estágio alimenta a entrada
padrão do seguinte.

## Componentes

- **command**
  - `Command`: vetor de argumentos validado (executável + argumentos)
  - `Pipeline`: sequência imutável e não vazia de `Command`
  - `as_pipeline`: normalização da entrada do executor

- **types**
  - `StageStatus`, `ExitStatus`, `StageResult`, `PipelineResult`

- **context**
  - `RunContext`: identidade da execução, eventos e warnings

## Limites Explícitos

- Não executa processos (ver `core.engine`)
- Não interpreta sintaxe de shell
- Não suporta topologias não lineares
"""

from .command import Command, Pipeline, as_pipeline
from .context import RunContext
from .types import ExitStatus, PipelineResult, StageResult, StageStatus

__all__ = [
    "Command",
    "Pipeline",
    "as_pipeline",
    "RunContext",
    "ExitStatus",
    "PipelineResult",
    "StageResult",
    "StageStatus",
]
