# src/procpipe/core/traceability/__init__.py
"""
Pacote de rastreabilidade do procpipe — RunRecord v1.

Responsabilidades principais:
    - Criar e manter o RunRecord de uma execução
    - Registrar eventos explícitos em um Event Log ordenado
    - Atualizar incrementalmente o estado de cada estágio
    - Persistir e restaurar o RunRecord em JSON

API pública exposta:
    - RunRecord      → estrutura canônica do registro
    - create_record  → criação explícita do registro
    - add_event      → registro explícito de eventos
    - stage_spawned  → estágio iniciado (pid)
    - stage_finished → estágio aguardado (status de término)
    - stage_failed   → estágio que não pôde ser iniciado
    - run_finished   → desfecho da execução
    - save_record    → persistência em JSON
    - load_record    → restauração a partir de JSON
"""

from .record import (
    RunRecord,
    add_event,
    create_record,
    load_record,
    run_finished,
    save_record,
    stage_failed,
    stage_finished,
    stage_spawned,
)

__all__ = [
    "RunRecord",
    "create_record",
    "add_event",
    "stage_spawned",
    "stage_finished",
    "stage_failed",
    "run_finished",
    "save_record",
    "load_record",
]
