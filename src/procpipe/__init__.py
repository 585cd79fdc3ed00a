# src/procpipe/__init__.py
"""
procpipe — execução de pipelines de comandos externos.

Compõe estágios como o `|` do shell: a saída padrão de cada comando
alimenta a entrada padrão do próximo, e a saída do último estágio é
capturada como texto. Comandos são vetores de argumentos já separados;
não há interpretação de sintaxe de shell.

Uso:
    >>> from procpipe import execute
    >>> execute([["echo", "foo"], ["rev"], ["tr", "a-z", "A-Z"]])
    'OOF'

Limites explícitos:
    - Não é um shell (sem redirecionamento, subshells, job control)
    - Topologia estritamente linear
    - Saída capturada inteira após o término do pipeline
"""

from .version import __version__
from .core.config import ExecutorOptions, load_config, load_options
from .core.engine import PipelineExecutor, execute
from .core.errors import ErrorPayload, exception_to_error
from .core.exceptions import (
    ConstructionError,
    DecodeError,
    PipelineError,
    PipelineIOError,
    SpawnError,
    StageFailure,
)
from .core.pipeline import Command, ExitStatus, Pipeline, PipelineResult, StageResult, StageStatus

__all__ = [
    "__version__",
    "execute",
    "PipelineExecutor",
    "Command",
    "Pipeline",
    "PipelineResult",
    "StageResult",
    "StageStatus",
    "ExitStatus",
    "ExecutorOptions",
    "load_config",
    "load_options",
    "ErrorPayload",
    "exception_to_error",
    "PipelineError",
    "ConstructionError",
    "SpawnError",
    "PipelineIOError",
    "DecodeError",
    "StageFailure",
]
