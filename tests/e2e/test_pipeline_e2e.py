# tests/e2e/test_pipeline_e2e.py
"""
Teste end-to-end do procpipe: configuração em YAML → execução → RunRecord.

Fluxo validado:
    1. arquivos de configuração (defaults + local) são resolvidos em opções
    2. o pipeline é executado com processos reais
    3. o RunRecord persistido descreve a execução de forma auditável

Invariantes:
    - O Event Log segue a ordem: spawn de cada estágio, término de cada
      estágio, desfecho da execução
    - O config_hash registrado é o fingerprint das opções efetivas
    - Falhas são persistidas com o payload canônico do erro

Limites explícitos:
    - Usa apenas utilitários POSIX comuns
"""

import sys
from pathlib import Path

import pytest

try:
    import procpipe
    from procpipe import PipelineExecutor, StageFailure, load_options
    from procpipe.core.traceability import load_record
except Exception as e:  # noqa: BLE001
    procpipe = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="requer utilitários POSIX")


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing procpipe public API. Implement:\n"
            "- src/procpipe/__init__.py (execute, PipelineExecutor, load_options)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def _write_config(tmp_path: Path, defaults_yaml: str, record: Path) -> Path:
    defaults = tmp_path / "procpipe.defaults.yaml"
    defaults.write_text(defaults_yaml, encoding="utf-8")
    local = tmp_path / "procpipe.local.yaml"
    local.write_text(
        "executor:\n"
        '  stdin: "null"\n'
        "traceability:\n"
        f"  record_path: {record}\n",
        encoding="utf-8",
    )
    return defaults


def test_e2e_success_with_record(tmp_path: Path, project_like_config_defaults_yaml, require_tools):
    """
    Executa `echo foo | rev | tr a-z A-Z` a partir de configuração em arquivo.

    Invariantes:
        - A saída é "OOF"
        - O registro contém três estágios bem-sucedidos e eventos ordenados
    """
    _require_imports()
    require_tools("echo", "rev", "tr")
    record_path = tmp_path / "runs" / "record.json"
    defaults = _write_config(tmp_path, project_like_config_defaults_yaml, record_path)

    opts = load_options(
        defaults_path=str(defaults), local_path=str(tmp_path / "procpipe.local.yaml")
    )
    assert opts.stdin == "null"
    assert opts.record_path == str(record_path)

    res = PipelineExecutor(
        [["echo", "foo"], ["rev"], ["tr", "a-z", "A-Z"]], options=opts
    ).run()
    assert res.output == "OOF"

    rec = load_record(record_path)
    assert rec.run["run_id"] == res.run_id
    assert rec.run["status"] == "success"
    assert rec.run["procpipe_version"] == procpipe.__version__
    assert rec.inputs["config_hash"] == opts.fingerprint()
    assert rec.inputs["argvs"] == [["echo", "foo"], ["rev"], ["tr", "a-z", "A-Z"]]
    assert [rec.stage(i)["status"] for i in range(3)] == ["success"] * 3
    assert [rec.stage(i)["pid"] for i in range(3)] == [s.pid for s in res.stages]

    assert [(e["event_type"], e.get("stage")) for e in rec.events] == [
        ("stage_spawned", 0),
        ("stage_spawned", 1),
        ("stage_spawned", 2),
        ("stage_finished", 0),
        ("stage_finished", 1),
        ("stage_finished", 2),
        ("run_finished", None),
    ]


def test_e2e_failure_persisted(tmp_path: Path, project_like_config_defaults_yaml, require_tools):
    """
    Verifica que uma falha de estágio é persistida no RunRecord.

    Invariantes:
        - run.status é "failed" e run.error carrega o payload canônico
        - A exceção levantada é a mesma descrita no registro
    """
    _require_imports()
    require_tools("echo", "sh")
    record_path = tmp_path / "record.json"
    defaults = _write_config(tmp_path, project_like_config_defaults_yaml, record_path)
    opts = load_options(
        defaults_path=str(defaults), local_path=str(tmp_path / "procpipe.local.yaml")
    )

    with pytest.raises(StageFailure) as ei:
        PipelineExecutor(
            [["echo", "foo"], ["sh", "-c", "cat >/dev/null; exit 7"]], options=opts
        ).run()
    assert ei.value.stage == 1

    rec = load_record(record_path)
    assert rec.run["status"] == "failed"
    assert rec.run["error"]["type"] == "PIPELINE_STAGE_FAILURE"
    assert rec.run["error"]["details"]["exit_code"] == 7
    assert rec.stage(1)["status"] == "failed"
    assert rec.stage(0)["status"] == "success"


def test_e2e_public_execute(require_tools):
    _require_imports()
    require_tools("echo", "rev", "tr")
    assert procpipe.execute([["echo", "foo"], ["rev"], ["tr", "a-z", "A-Z"]]) == "OOF"
