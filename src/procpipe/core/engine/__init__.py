# src/procpipe/core/engine/__init__.py
"""
Engine do procpipe.

Este pacote contém a implementação responsável por **planejar** a ligação
dos estágios e **executar** o pipeline.

Componentes principais:
    - planner  → decide o stdin de cada estágio antes do spawn
    - executor → spawn, ligação por pipes, captura, reap e classificação

Princípios fundamentais:
    - Planejamento e execução são responsabilidades separadas
    - A ordem de spawn é determinística (ordem do pipeline)
    - Todos os estágios lançados são aguardados antes do retorno, em qualquer caminho
    - Nenhuma falha é silenciada: o desfecho é um resultado ou uma exceção tipada

Limites explícitos:
    - Não interpreta sintaxe de shell
    - Não aplica timeout nem cancelamento
    - Não consome a saída de forma incremental
"""

from .executor import PipelineExecutor, execute
from .planner import StagePlan, StdinSource, plan_stages

__all__ = [
    "PipelineExecutor",
    "execute",
    "StagePlan",
    "StdinSource",
    "plan_stages",
]
