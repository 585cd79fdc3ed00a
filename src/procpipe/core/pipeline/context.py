# src/procpipe/core/pipeline/context.py
"""
Contexto de execução de um pipeline.

Este módulo define o `RunContext`, a estrutura que acompanha uma única
chamada ao executor e concentra:
    - identidade da execução (run_id, created_at)
    - configuração efetiva utilizada
    - log estruturado de eventos (spawn, leitura, término, limpeza)
    - warnings não fatais por estágio (ex.: falhas de limpeza)

Princípios fundamentais:
    - Isolamento por execução (cada chamada possui seu próprio contexto)
    - Nenhum registro global de pipelines em execução
    - Eventos são estruturados e também encaminhados ao logger `procpipe`

Invariantes:
    - Eventos sempre incluem `run_id` e `stage`
    - Warnings são agrupados por índice de estágio
    - Eventos preservam a ordem de registro

Limites explícitos:
    - Não executa processos
    - Não persiste dados automaticamente (ver `traceability.record`)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger("procpipe")

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


@dataclass
class RunContext:
    """
    Contexto de execução de uma chamada ao executor.

    `stage` nos eventos é o índice do estágio, ou None para eventos
    de escopo do pipeline inteiro.
    """
    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    meta: Dict[str, Any] = field(default_factory=dict)

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[Optional[int], List[str]] = field(default_factory=dict, init=False)

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, stage: Optional[int], level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "stage": stage,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

        logger.log(
            _LEVELS.get(level.upper(), logging.INFO),
            "[%s] stage=%s %s",
            self.run_id,
            stage,
            message,
            extra={"procpipe_event": event},
        )

    def add_warning(self, *, stage: Optional[int], message: str) -> None:
        if stage not in self.warnings:
            self.warnings[stage] = []
        self.warnings[stage].append(message)
        self.log(stage=stage, level="WARNING", message=message)
