# src/procpipe/core/engine/planner.py
"""
Planejador de ligação de estágios do pipeline.

Este módulo decide, **antes de qualquer spawn**, de onde cada estágio lê
sua entrada padrão:

    - estágio 0:     stdin herdado do chamador (ou /dev/null, se configurado)
    - estágio i > 0: stdin é a ponta de leitura do pipe vindo do estágio i-1

A saída padrão de todo estágio é sempre um pipe: o do último é lido
pelo executor, os demais são repassados ao estágio seguinte.

Princípios fundamentais:
    - Planejamento e execução são responsabilidades separadas
    - O plano é determinístico para o mesmo pipeline
    - Nenhuma ponta de pipe é compartilhada entre estágios não adjacentes

Limites explícitos:
    - Não cria pipes nem processos
    - Não interage com RunContext
    - Não suporta fan-out/fan-in (topologia é estritamente linear)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List

from procpipe.core.config.options import NULL
from procpipe.core.pipeline.command import Command, Pipeline


class StdinSource(str, Enum):
    """Origem da entrada padrão de um estágio."""
    INHERIT = "inherit"
    NULL = "null"
    PIPE = "pipe"


@dataclass(frozen=True)
class StagePlan:
    """Ligação planejada de um estágio."""
    index: int
    command: Command
    stdin: StdinSource


def plan_stages(pipeline: Pipeline, *, stdin_policy: str = "inherit") -> List[StagePlan]:
    """
    Produz o plano de ligação de cada estágio, na ordem do pipeline.

    Args:
        pipeline (Pipeline): Pipeline já validado (não vazio).
        stdin_policy (str): "inherit" ou "null" para o stdin do estágio 0.

    Returns:
        List[StagePlan]: Um plano por estágio, índices 0..n-1.
    """
    first_stdin = StdinSource.NULL if stdin_policy == NULL else StdinSource.INHERIT
    plans: List[StagePlan] = []
    for i, command in enumerate(pipeline):
        plans.append(
            StagePlan(
                index=i,
                command=command,
                stdin=first_stdin if i == 0 else StdinSource.PIPE,
            )
        )
    return plans
