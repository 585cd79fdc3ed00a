# src/procpipe/core/traceability/record.py
"""
RunRecord v1 — registro de uma execução de pipeline.

Este módulo define a estrutura e as operações canônicas do RunRecord,
o artefato que consolida, de forma determinística e auditável:
    - metadados da execução (run_id, início, fim, desfecho)
    - entradas (hash da configuração e vetores de argumentos)
    - estado de cada estágio (pid, status de término, erro, duração)
    - Event Log ordenado de eventos explícitos

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente
    - Toda mutação ocorre por chamadas explícitas da API
    - A ordem do Event Log reflete a ordem real de execução
    - O RunRecord é serializável e reconstruível (round-trip JSON)

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - Estágios são indexados pela string do índice ("0", "1", ...) para
      que o round-trip via JSON preserve as chaves

Limites explícitos:
    - Não executa processos
    - Não decide políticas de falha
    - Não realiza migração de versões de schema
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Normaliza um timestamp para timezone-aware em UTC (naive é assumido UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    """Duração em milissegundos entre dois timestamps, nunca negativa."""
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


@dataclass
class RunRecord:
    """
    RunRecord v1 — registro de uma execução de pipeline.

    Campos principais:
        - run: run_id, started_at, procpipe_version, e (ao final) finished_at/status/error
        - inputs: config_hash e os vetores de argumentos de cada estágio
        - stages: estado por estágio, indexado por str(index)
        - events: Event Log ordenado

    Invariantes:
        - `stages` é sempre um dicionário indexado por str(index)
        - `events` é sempre uma lista ordenada
        - A estrutura completa é serializável em JSON
    """
    run: Dict[str, Any]
    inputs: Dict[str, Any]
    stages: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def stage(self, index: int) -> Dict[str, Any]:
        return self.stages[str(index)]

    def to_dict(self) -> Dict[str, Any]:
        """Cópia serializável e independente do estado interno."""
        return {
            "run": dict(self.run),
            "inputs": {
                **self.inputs,
                "argvs": [list(a) for a in self.inputs.get("argvs", [])],
            },
            "stages": {k: dict(v) for k, v in self.stages.items()},
            "events": [dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunRecord":
        """Reconstrução permissiva: campos ausentes viram estruturas vazias."""
        return cls(
            run=dict(data.get("run", {})),
            inputs=dict(data.get("inputs", {})),
            stages={k: dict(v) for k, v in (data.get("stages", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )


def create_record(
    *,
    run_id: str,
    started_at: datetime,
    procpipe_version: str,
    config_hash: str,
    argvs: Sequence[Sequence[str]],
) -> RunRecord:
    """
    Cria o RunRecord inicial de uma execução.

    ⚠️ Importante: esta função **não emite eventos implicitamente**.
    O Event Log inicia vazio e só é preenchido por chamadas explícitas
    a `add_event`, `stage_spawned`, `stage_finished`, `stage_failed`
    ou `run_finished`.

    Args:
        run_id (str): Identificador único da execução.
        started_at (datetime): Timestamp de início da execução.
        procpipe_version (str): Versão da biblioteca utilizada.
        config_hash (str): Hash da configuração efetiva.
        argvs (Sequence[Sequence[str]]): Vetor de argumentos de cada estágio.

    Returns:
        RunRecord: Registro inicializado, com `stages` e `events` vazios.
    """
    return RunRecord(
        run={
            "run_id": run_id,
            "started_at": _iso(started_at),
            "procpipe_version": procpipe_version,
        },
        inputs={
            "config_hash": config_hash,
            "argvs": [list(a) for a in argvs],
        },
        stages={},
        events=[],
    )


def add_event(
    record: RunRecord,
    *,
    event_type: str,
    ts: datetime,
    stage: Optional[int] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Adiciona um evento explícito ao Event Log.

    Cada chamada adiciona exatamente um evento; eventos não são
    reordenados nem deduplicados.
    """
    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if stage is not None:
        ev["stage"] = stage
    if payload is not None:
        ev["payload"] = payload
    record.events.append(ev)


def stage_spawned(
    record: RunRecord,
    *,
    stage: int,
    argv: Sequence[str],
    pid: int,
    ts: datetime,
) -> None:
    """Registra que o estágio foi iniciado e está em execução."""
    ts = _ensure_tzaware_utc(ts)
    s = record.stages.setdefault(str(stage), {})
    s.update(
        {
            "index": stage,
            "argv": list(argv),
            "pid": pid,
            "status": "running",
            "started_at": _iso(ts),
        }
    )
    add_event(record, event_type="stage_spawned", ts=ts, stage=stage, payload={"pid": pid})


def stage_finished(
    record: RunRecord,
    *,
    stage: int,
    ts: datetime,
    exit_status: Dict[str, Any],
) -> None:
    """
    Registra o término (reap) de um estágio.

    O status final é `success` para returncode 0 e `failed` caso contrário.

    Args:
        record (RunRecord): Registro a ser atualizado.
        stage (int): Índice do estágio.
        ts (datetime): Timestamp do término observado.
        exit_status (Dict[str, Any]): `ExitStatus.to_dict()` do estágio.
    """
    ts = _ensure_tzaware_utc(ts)
    s = record.stages.setdefault(str(stage), {"index": stage})

    started_iso = s.get("started_at")
    started_dt = datetime.fromisoformat(started_iso) if started_iso else ts

    status = "success" if exit_status.get("returncode") == 0 else "failed"
    s.update(
        {
            "status": status,
            "finished_at": _iso(ts),
            "duration_ms": _ms_between(started_dt, ts),
            **exit_status,
        }
    )
    add_event(
        record,
        event_type="stage_finished",
        ts=ts,
        stage=stage,
        payload={"status": status, "returncode": exit_status.get("returncode")},
    )


def stage_failed(
    record: RunRecord,
    *,
    stage: int,
    argv: Sequence[str],
    ts: datetime,
    error: Dict[str, Any],
) -> None:
    """Registra um estágio que não chegou a executar (ex.: falha de spawn)."""
    ts = _ensure_tzaware_utc(ts)
    s = record.stages.setdefault(str(stage), {})
    s.update(
        {
            "index": stage,
            "argv": list(argv),
            "status": "failed",
            "finished_at": _iso(ts),
            "error": error,
        }
    )
    add_event(record, event_type="stage_failed", ts=ts, stage=stage, payload={"error": error})


def run_finished(
    record: RunRecord,
    *,
    ts: datetime,
    error: Optional[Dict[str, Any]] = None,
) -> None:
    """Registra o desfecho da execução (`success`, ou `failed` com o payload do erro)."""
    ts = _ensure_tzaware_utc(ts)
    status = "failed" if error is not None else "success"
    record.run["finished_at"] = _iso(ts)
    record.run["status"] = status
    if error is not None:
        record.run["error"] = error
    add_event(record, event_type="run_finished", ts=ts, payload={"status": status})


def save_record(record: RunRecord, path: Path) -> None:
    """Persiste o RunRecord em JSON determinístico (chaves ordenadas, indentado)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(record.to_dict(), ensure_ascii=False, indent=2, sort_keys=True),
        encoding="utf-8",
    )


def load_record(path: Path) -> RunRecord:
    """
    Carrega um RunRecord persistido.

    Raises:
        FileNotFoundError: Se o arquivo não existir.
        json.JSONDecodeError: Em caso de JSON inválido.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return RunRecord.from_dict(data)
