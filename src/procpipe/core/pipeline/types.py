# src/procpipe/core/pipeline/types.py
"""
Tipos canônicos de resultado do procpipe.

Este módulo define as estruturas que descrevem o desfecho de uma execução:

    - StageStatus    → enum de estados finais de um estágio (SUCCESS, FAILED)
    - ExitStatus     → status de término de um processo (código ou sinal)
    - StageResult    → resultado imutável de um estágio já coletado (reaped)
    - PipelineResult → resultado imutável de um pipeline bem-sucedido

Princípios fundamentais:
    - Tipos são estáveis e serializáveis (`to_dict`)
    - Nenhuma lógica de execução vive neste módulo
    - PipelineResult só existe em caso de sucesso; falhas são exceções

Limites explícitos:
    - Não executa processos
    - Não decide políticas de falha
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from procpipe.core.exceptions import signal_name


class StageStatus(str, Enum):
    """
    Estados finais possíveis de um estágio.

    Os valores são strings para facilitar serialização em JSON e
    persistência no RunRecord.

    Estados definidos:
        - SUCCESS: o processo saiu com código 0
        - FAILED: código de saída não-zero ou término por sinal
    """
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ExitStatus:
    """
    Status de término de um processo filho.

    Construído a partir do `returncode` de `subprocess.Popen`:
        - returncode >= 0 → saída normal com `exit_code`
        - returncode < 0  → término pelo sinal `-returncode` (POSIX)
    """
    returncode: int

    @property
    def exit_code(self) -> Optional[int]:
        return self.returncode if self.returncode >= 0 else None

    @property
    def signal(self) -> Optional[int]:
        return -self.returncode if self.returncode < 0 else None

    @property
    def signal_name(self) -> Optional[str]:
        sig = self.signal
        return signal_name(sig) if sig is not None else None

    @property
    def success(self) -> bool:
        return self.returncode == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "returncode": self.returncode,
            "exit_code": self.exit_code,
            "signal": self.signal,
            "signal_name": self.signal_name,
        }

    def __str__(self) -> str:
        if self.signal is not None:
            return f"signal {self.signal} ({self.signal_name})"
        return f"exit code {self.exit_code}"


@dataclass(frozen=True)
class StageResult:
    """
    Resultado imutável de um estágio já aguardado.

    Campos:
        - index: posição do estágio no pipeline (0-based)
        - argv: vetor de argumentos executado
        - pid: identificador do processo no SO
        - exit_status: status de término
    """
    index: int
    argv: Tuple[str, ...]
    pid: int
    exit_status: ExitStatus

    @property
    def status(self) -> StageStatus:
        return StageStatus.SUCCESS if self.exit_status.success else StageStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "argv": list(self.argv),
            "pid": self.pid,
            "status": self.status.value,
            **self.exit_status.to_dict(),
        }


@dataclass(frozen=True)
class PipelineResult:
    """
    Resultado de um pipeline concluído com sucesso.

    Campos:
        - output: saída do último estágio, decodificada, sem o terminador de linha final
        - raw: bytes capturados do último estágio, sem nenhuma alteração
        - stages: resultado de cada estágio, na ordem do pipeline
        - run_id: identificador da execução (ver RunContext / RunRecord)
    """
    output: str
    raw: bytes
    stages: Tuple[StageResult, ...] = field(default_factory=tuple)
    run_id: Optional[str] = None

    @property
    def lines(self) -> List[str]:
        return self.output.splitlines()

    def __str__(self) -> str:
        return self.output
