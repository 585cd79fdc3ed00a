# src/procpipe/core/engine/executor.py
"""
Executor de pipelines de comandos do procpipe.

Este módulo lança um processo filho por estágio, conecta a saída padrão
de cada estágio à entrada padrão do seguinte, captura a saída do último
estágio, aguarda **todos** os estágios e classifica o desfecho.

Protocolo de execução:
    1. planejar a ligação de cada estágio (ver `planner.plan_stages`)
    2. lançar os estágios em ordem 0..n-1; após lançar o estágio i, o
       processo pai fecha sua cópia do stdout do estágio i-1
    3. ler o stdout do último estágio até EOF
    4. aguardar todos os estágios (reap), em qualquer caminho de saída
    5. decodificar a saída (strict) → DecodeError
    6. o primeiro estágio com código não-zero ou sinal → StageFailure
    7. sucesso: texto sem um único terminador de linha final

Decisões arquiteturais:
    - Os estágios executam concorrentemente (processos do SO); o executor
      faz uma única leitura bloqueante seguida das esperas
    - Falha de spawn no estágio i: a ponta de leitura do estágio i-1 é
      fechada e os estágios já lançados são aguardados, não finalizados
    - stderr de todos os estágios é herdado do chamador (configurável)
    - A limpeza nunca substitui o erro original; falhas de limpeza viram
      warnings no RunContext

Limites explícitos:
    - Sem timeout e sem cancelamento: um estágio que nunca termina bloqueia a chamada
    - A saída do último estágio é mantida inteira em memória, sem limite
    - Se o processo chamador morrer, a limpeza dos estágios fica a cargo do SO
"""

from __future__ import annotations

import subprocess
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Any, List, Optional

from procpipe.version import __version__
from procpipe.core.config.options import NULL, ExecutorOptions
from procpipe.core.errors import exception_to_error
from procpipe.core.exceptions import (
    SpawnError,
    decode_error,
    io_error,
    spawn_error,
    stage_failure,
)
from procpipe.core.pipeline.command import as_pipeline
from procpipe.core.pipeline.context import RunContext
from procpipe.core.pipeline.types import ExitStatus, PipelineResult, StageResult
from procpipe.core.traceability.record import (
    RunRecord,
    create_record,
    run_finished,
    save_record,
    stage_failed,
    stage_finished,
    stage_spawned,
)

from .planner import StagePlan, StdinSource, plan_stages


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PipelineExecutor:
    """
    Executor canônico de um pipeline linear de comandos.

    Cada chamada a `run` é independente: cria um novo RunContext e um novo
    RunRecord, acessíveis em `ctx` e `record` após a execução.
    """

    def __init__(self, stages: Any, *, options: Optional[ExecutorOptions] = None):
        self.pipeline = as_pipeline(stages)
        self.options = options if options is not None else ExecutorOptions()
        self.ctx: Optional[RunContext] = None
        self.record: Optional[RunRecord] = None

    # ------------------------------------------------------------------
    # API pública
    # ------------------------------------------------------------------

    def run(self) -> PipelineResult:
        """
        Executa o pipeline e retorna o resultado do último estágio.

        Raises:
            SpawnError: Um estágio não pôde ser iniciado.
            PipelineIOError: Falha lendo a saída ou fechando um pipe.
            DecodeError: Saída não decodificável no encoding configurado.
            StageFailure: Algum estágio saiu com código não-zero ou por sinal.
        """
        self._begin_run()
        try:
            result = self._execute()
        except Exception as exc:
            run_finished(self.record, ts=_now(), error=exception_to_error(exc).to_dict())
            self._persist_record()
            raise
        run_finished(self.record, ts=_now())
        self._persist_record()
        return result

    # ------------------------------------------------------------------
    # Execução
    # ------------------------------------------------------------------

    def _begin_run(self) -> None:
        config = self.options.to_config()
        started_at = _now()
        run_id = uuid.uuid4().hex
        self.ctx = RunContext(
            run_id=run_id,
            created_at=started_at,
            config=config,
            meta={"pipeline": str(self.pipeline)},
        )
        self.record = create_record(
            run_id=run_id,
            started_at=started_at,
            procpipe_version=__version__,
            config_hash=self.options.fingerprint(),
            argvs=self.pipeline.argvs,
        )

    def _execute(self) -> PipelineResult:
        plans = plan_stages(self.pipeline, stdin_policy=self.options.stdin)
        self.ctx.log(
            stage=None,
            level="INFO",
            message=f"executando pipeline com {len(plans)} estágio(s)",
            pipeline=str(self.pipeline),
        )

        last = plans[-1]
        procs: List[subprocess.Popen] = []
        try:
            self._spawn_all(plans, procs)
            raw = self._read_output(procs[-1], stage=last.index)
        finally:
            statuses = self._reap(procs)

        output = self._decode(raw, stage=last.index)
        self._check_statuses(plans, statuses)

        return PipelineResult(
            output=self._strip(output),
            raw=raw,
            stages=tuple(
                StageResult(
                    index=plan.index,
                    argv=plan.command.argv,
                    pid=proc.pid,
                    exit_status=status,
                )
                for plan, proc, status in zip(plans, procs, statuses)
            ),
            run_id=self.ctx.run_id,
        )

    def _stdin_for(self, plan: StagePlan, upstream: Optional[IO[bytes]]) -> Any:
        if plan.stdin is StdinSource.PIPE:
            return upstream
        if plan.stdin is StdinSource.NULL:
            return subprocess.DEVNULL
        return None

    def _spawn(self, plan: StagePlan, stdin: Any) -> subprocess.Popen:
        argv = list(plan.command.argv)
        env = dict(self.options.env) if self.options.env is not None else None
        try:
            proc = subprocess.Popen(
                argv,
                stdin=stdin,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL if self.options.stderr == NULL else None,
                cwd=self.options.cwd,
                env=env,
                close_fds=True,
            )
        except (OSError, ValueError) as e:
            # ValueError: argumentos que o SO recusaria (ex.: NUL em argv, env ou cwd)
            err = spawn_error(stage=plan.index, argv=argv, exc=e)
            stage_failed(
                self.record,
                stage=plan.index,
                argv=argv,
                ts=_now(),
                error=err.to_payload().to_dict(),
            )
            self.ctx.log(stage=plan.index, level="ERROR", message=err.message, errno=err.errno)
            raise err from e

        stage_spawned(self.record, stage=plan.index, argv=argv, ts=_now(), pid=proc.pid)
        self.ctx.log(
            stage=plan.index,
            level="INFO",
            message=f"estágio iniciado: {plan.command}",
            pid=proc.pid,
        )
        return proc

    def _spawn_all(self, plans: List[StagePlan], procs: List[subprocess.Popen]) -> None:
        upstream: Optional[IO[bytes]] = None
        for plan in plans:
            try:
                proc = self._spawn(plan, self._stdin_for(plan, upstream))
            except SpawnError:
                # sem leitor: o estágio anterior recebe EOF/SIGPIPE e pode terminar
                if upstream is not None:
                    self._release(upstream, stage=plan.index - 1)
                raise
            procs.append(proc)

            if upstream is not None:
                self._close_handed_off(upstream, stage=plan.index - 1)
            upstream = proc.stdout

    def _close_handed_off(self, stream: IO[bytes], *, stage: int) -> None:
        try:
            stream.close()
        except OSError as e:
            raise io_error(stage=stage, operation="close", exc=e) from e

    def _release(self, stream: IO[bytes], *, stage: int) -> None:
        try:
            stream.close()
        except OSError as e:
            self.ctx.add_warning(stage=stage, message=f"falha ao fechar pipe durante limpeza: {e}")

    def _read_output(self, proc: subprocess.Popen, *, stage: int) -> bytes:
        try:
            data = proc.stdout.read()
        except OSError as e:
            raise io_error(stage=stage, operation="read", exc=e) from e
        self.ctx.log(stage=stage, level="DEBUG", message="saída capturada", bytes=len(data))
        return data

    def _reap(self, procs: List[subprocess.Popen]) -> List[ExitStatus]:
        """Fecha pipes remanescentes e aguarda todos os estágios lançados."""
        for index, proc in enumerate(procs):
            if proc.stdout is not None and not proc.stdout.closed:
                self._release(proc.stdout, stage=index)

        statuses: List[ExitStatus] = []
        for index, proc in enumerate(procs):
            status = ExitStatus(proc.wait())
            stage_finished(self.record, stage=index, ts=_now(), exit_status=status.to_dict())
            self.ctx.log(
                stage=index,
                level="INFO" if status.success else "ERROR",
                message=f"estágio terminou: {status}",
                returncode=status.returncode,
            )
            statuses.append(status)
        return statuses

    def _decode(self, raw: bytes, *, stage: int) -> str:
        try:
            return raw.decode(self.options.encoding)
        except UnicodeDecodeError as e:
            raise decode_error(stage=stage, encoding=self.options.encoding, exc=e) from e

    def _check_statuses(self, plans: List[StagePlan], statuses: List[ExitStatus]) -> None:
        for plan, status in zip(plans, statuses):
            if not status.success:
                raise stage_failure(
                    stage=plan.index,
                    argv=list(plan.command.argv),
                    returncode=status.returncode,
                )

    def _strip(self, text: str) -> str:
        if not self.options.strip_trailing_newline:
            return text
        if text.endswith("\r\n"):
            return text[:-2]
        if text.endswith("\n"):
            return text[:-1]
        return text

    def _persist_record(self) -> None:
        if self.options.record_path is None:
            return
        try:
            save_record(self.record, Path(self.options.record_path))
        except OSError as e:
            self.ctx.add_warning(stage=None, message=f"falha ao salvar RunRecord: {e}")


def execute(stages: Any, *, options: Optional[ExecutorOptions] = None) -> str:
    """
    Executa um pipeline e retorna a saída do último estágio como texto.

    Exemplo:
        >>> execute([["echo", "foo"], ["rev"], ["tr", "a-z", "A-Z"]])
        'OOF'

    Args:
        stages: `Pipeline`, `Command` ou sequência de sequências de strings.
        options (Optional[ExecutorOptions]): Opções do executor (defaults quando None).

    Returns:
        str: Saída decodificada do último estágio, sem um terminador de linha final.

    Raises:
        ConstructionError: Pipeline vazio ou comando inválido (nada é executado).
        SpawnError, PipelineIOError, DecodeError, StageFailure: ver `PipelineExecutor.run`.
    """
    return PipelineExecutor(stages, options=options).run().output
