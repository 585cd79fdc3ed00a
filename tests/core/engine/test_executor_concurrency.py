# tests/core/engine/test_executor_concurrency.py
"""
Testes de concorrência e limpeza de processos do executor.

Os estágios executam concorrentemente; o volume de dados que atravessa
o pipeline pode exceder em muito a capacidade de um buffer de pipe do SO.

Os testes asseguram que:
- grandes volumes atravessam o pipeline sem deadlock
- um produtor infinito termina quando o consumidor fecha a entrada
- uma falha de spawn no meio do pipeline não trava a chamada
- nenhum processo filho fica sem ser aguardado (zumbi)

Decisões arquiteturais:
    - Um produtor encerrado por SIGPIPE é reportado como StageFailure
      (o status de término é observado literalmente)

Limites explícitos:
    - Não aplica timeout (um estágio que nunca termina bloqueia a chamada)
"""

import os
import sys

import pytest

try:
    from procpipe.core.engine.executor import PipelineExecutor, execute
    from procpipe.core.exceptions import SpawnError, StageFailure
except Exception as e:  # noqa: BLE001
    PipelineExecutor = None
    execute = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="requer utilitários POSIX")


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing executor. Implement:\n"
            "- src/procpipe/core/engine/executor.py\n"
            f"Import error: {_IMPORT_ERR}"
        )


def _assert_reaped(pids):
    """Falha se algum pid ainda puder ser aguardado pelo processo de teste."""
    for pid in pids:
        with pytest.raises(ChildProcessError):
            os.waitpid(pid, os.WNOHANG)


def test_large_volume_through_pipeline(require_tools):
    """
    Verifica 1 MB atravessando o pipeline, bem acima de um buffer de pipe.

    Invariantes:
        - A chamada termina e a contagem de bytes é exata
    """
    _require_imports()
    require_tools("head", "wc")
    out = execute([["head", "-c", "1000000", "/dev/zero"], ["wc", "-c"]])
    assert out.strip() == "1000000"


def test_large_output_captured_from_last_stage(require_tools):
    _require_imports()
    require_tools("head", "tr")
    out = execute([["head", "-c", "200000", "/dev/zero"], ["tr", "\\0", "a"]])
    assert out == "a" * 200000


def test_many_stages(require_tools):
    _require_imports()
    require_tools("echo", "cat")
    stages = [["echo", "through"]] + [["cat"]] * 20
    ex = PipelineExecutor(stages)
    res = ex.run()
    assert res.output == "through"
    assert len(res.stages) == 21
    _assert_reaped([s.pid for s in res.stages])


def test_infinite_producer_terminates(require_tools):
    """
    Verifica `yes | head -c N`: o consumidor fecha a entrada e o produtor termina.

    Invariantes:
        - A chamada retorna (sem deadlock)
        - O produtor, encerrado por SIGPIPE, é reportado como falha do estágio 0
    """
    _require_imports()
    require_tools("yes", "head")
    ex = PipelineExecutor([["yes"], ["head", "-c", "1000000"]])
    with pytest.raises(StageFailure) as ei:
        ex.run()
    assert ei.value.stage == 0
    assert ei.value.returncode != 0
    assert ex.record.stage(1)["status"] == "success"
    _assert_reaped([ex.record.stage(0)["pid"], ex.record.stage(1)["pid"]])


def test_spawn_failure_mid_pipeline_does_not_hang(require_tools):
    """
    Verifica que o estágio 0 (produtor infinito) termina quando o estágio 1 não inicia.

    Invariantes:
        - A ponta de leitura do estágio 0 é fechada pelo executor
        - O estágio 0 é aguardado e não vira zumbi
    """
    _require_imports()
    require_tools("yes")
    ex = PipelineExecutor([["yes"], ["procpipe-no-such-binary-xyz"]])
    with pytest.raises(SpawnError) as ei:
        ex.run()
    assert ei.value.stage == 1

    stage0 = ex.record.stage(0)
    assert stage0["returncode"] is not None
    assert stage0["returncode"] != 0
    _assert_reaped([stage0["pid"]])


def test_all_stages_reaped_on_failure(require_tools):
    _require_imports()
    require_tools("echo", "false", "cat")
    ex = PipelineExecutor([["echo", "x"], ["false"], ["cat"]])
    with pytest.raises(StageFailure):
        ex.run()
    pids = [ex.record.stage(i)["pid"] for i in range(3)]
    assert all(ex.record.stage(i)["returncode"] is not None for i in range(3))
    _assert_reaped(pids)


def test_concurrent_executors_are_isolated(require_tools):
    """Execuções em threads distintas não compartilham estado."""
    from concurrent.futures import ThreadPoolExecutor

    _require_imports()
    require_tools("echo", "tr")

    def _run(word):
        return execute([["echo", word], ["tr", "a-z", "A-Z"]])

    words = [f"job{i}" for i in range(8)]
    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(_run, words))
    assert results == [w.upper() for w in words]
