# tests/core/pipeline/test_command.py
"""
Testes de construção de Command e Pipeline.

Os testes asseguram que:
- comandos e pipelines são normalizados para tuplas imutáveis
- entradas vazias ou malformadas levantam ConstructionError
- o índice do estágio inválido é reportado em `details["stage"]`
- a composição com `|` e `pipe` produz novos pipelines

Decisões arquiteturais:
    - Validação ocorre na construção, antes de qualquer spawn
    - Argumentos são repassados literalmente (sem shell)

Limites explícitos:
    - Não executa processos
"""

import pytest

try:
    from procpipe.core.exceptions import ConstructionError, PipelineError
    from procpipe.core.pipeline.command import Command, Pipeline, as_pipeline
except Exception as e:  # noqa: BLE001
    Command = None
    Pipeline = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing pipeline command types. Implement:\n"
            "- src/procpipe/core/pipeline/command.py (Command, Pipeline, as_pipeline)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_command_normalizes_argv():
    _require_imports()
    cmd = Command(["tr", "a-z", "A-Z"])
    assert cmd.argv == ("tr", "a-z", "A-Z")
    assert cmd.program == "tr"
    assert cmd.args == ("a-z", "A-Z")
    assert len(cmd) == 3
    assert list(cmd) == ["tr", "a-z", "A-Z"]
    assert str(cmd) == "tr a-z A-Z"


def test_command_args_passed_literally():
    """Metacaracteres de shell são apenas texto no argv."""
    _require_imports()
    cmd = Command(["echo", "$HOME", "*", "a | b"])
    assert cmd.args == ("$HOME", "*", "a | b")


@pytest.mark.parametrize(
    "argv",
    [
        [],
        (),
        "echo foo",
        b"echo",
        42,
        ["echo", 1],
        ["echo", None],
        ["ec\x00ho"],
    ],
)
def test_command_rejects_invalid_argv(argv):
    """
    Verifica que vetores de argumentos inválidos são rejeitados.

    Invariantes:
        - String solta não é iterada caractere a caractere
        - Comando vazio é erro de construção
    """
    _require_imports()
    with pytest.raises(ConstructionError):
        Command(argv)


def test_empty_pipeline_rejected():
    """
    Verifica que um pipeline vazio é rejeitado na construção.

    Invariantes:
        - O erro é ConstructionError, subclasse de PipelineError
        - Nenhum estágio é reportado (o pipeline inteiro é inválido)
    """
    _require_imports()
    with pytest.raises(ConstructionError) as ei:
        Pipeline([])
    assert isinstance(ei.value, PipelineError)
    assert ei.value.stage is None
    assert ei.value.code == "PIPELINE_CONSTRUCTION_ERROR"


def test_empty_command_reports_stage_index():
    _require_imports()
    with pytest.raises(ConstructionError) as ei:
        Pipeline([["echo", "foo"], [], ["rev"]])
    assert ei.value.stage == 1
    assert ei.value.details["reason"].startswith("estágio 1")


@pytest.mark.parametrize("value", ["echo foo", b"echo", None, 3])
def test_pipeline_rejects_non_sequence(value):
    _require_imports()
    with pytest.raises(ConstructionError):
        Pipeline(value)


def test_pipeline_rejects_bare_command():
    """Um Command passado como `commands` seria iterado como argv."""
    _require_imports()
    with pytest.raises(ConstructionError):
        Pipeline(Command(["echo"]))


def test_pipeline_of_and_composition():
    _require_imports()
    p = Pipeline.of(["echo", "foo"], Command(["rev"]))
    assert len(p) == 2
    assert isinstance(p[1], Command)

    q = p | ["tr", "a-z", "A-Z"]
    assert len(q) == 3
    assert len(p) == 2
    assert q.argvs == [["echo", "foo"], ["rev"], ["tr", "a-z", "A-Z"]]
    assert str(q) == "echo foo | rev | tr a-z A-Z"

    joined = p.pipe(Pipeline.of(["cat"], ["wc", "-c"]))
    assert [c.program for c in joined] == ["echo", "rev", "cat", "wc"]


def test_command_or_builds_pipeline():
    _require_imports()
    p = Command(["echo", "x"]) | ["cat"]
    assert isinstance(p, Pipeline)
    assert p.argvs == [["echo", "x"], ["cat"]]


def test_pipe_reports_appended_stage_index():
    _require_imports()
    p = Pipeline.of(["echo"], ["cat"])
    with pytest.raises(ConstructionError) as ei:
        p | []
    assert ei.value.stage == 2


def test_as_pipeline_accepts_supported_inputs():
    _require_imports()
    p = Pipeline.of(["echo"])
    assert as_pipeline(p) is p
    assert as_pipeline(Command(["echo"])).argvs == [["echo"]]
    assert as_pipeline([("echo", "a"), ["cat"]]).argvs == [["echo", "a"], ["cat"]]
    with pytest.raises(ConstructionError):
        as_pipeline([])
