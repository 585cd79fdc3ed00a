# tests/conftest.py
"""
Fixtures compartilhados para testes do procpipe.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações YAML mínimas e determinísticas (defaults + local)
- contexto de execução controlado (RunContext)
- guarda para ferramentas POSIX exigidas pelos testes de processo

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas
    - Testes que lançam processos dependem apenas de utilitários POSIX
      comuns e são pulados quando o utilitário não existe

Limites explícitos:
    - Nenhuma fixture executa pipeline
    - Não substituir testes de integração
"""

import shutil
from datetime import datetime, timezone

import pytest


# =====================================================
# Config Loader fixtures
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    Fixture que fornece um YAML de defaults semelhante ao uso real.

    Representa o conteúdo típico de um `procpipe.defaults.yaml` versionado
    junto ao projeto consumidor, sobre o qual overrides locais são aplicados.

    Returns:
        str: Conteúdo YAML representando configuração padrão (defaults).
    """
    return """\
executor:
  stdin: inherit
  stderr: inherit
  encoding: utf-8
  strip_trailing_newline: true
traceability:
  record_path: null
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """
    Fixture que fornece um YAML de overrides locais.

    Foco em comportamento de override: silencia stderr, troca o stdin do
    primeiro estágio e define um diretório de trabalho.

    Returns:
        str: Conteúdo YAML representando configuração local de override.
    """
    return """\
executor:
  stdin: "null"
  stderr: "null"
  cwd: /tmp
"""


# =====================================================
# Pipeline fixtures (RunContext)
# =====================================================

@pytest.fixture
def dummy_config() -> dict:
    """Configuração mínima já resolvida, equivalente aos defaults embutidos."""
    return {
        "executor": {
            "stdin": "inherit",
            "stderr": "inherit",
            "encoding": "utf-8",
            "strip_trailing_newline": True,
            "cwd": None,
            "env": None,
        },
        "traceability": {"record_path": None},
    }


@pytest.fixture
def dummy_ctx(dummy_config):
    """
    Fixture que fornece um RunContext determinístico para testes.

    Decisões arquiteturais:
        - `run_id` e `created_at` são fixos para garantir determinismo
        - O import de RunContext é lazy para falhar com mensagem clara

    Returns:
        RunContext: Contexto de execução isolado e previsível.
    """
    from procpipe.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config=dummy_config,
        meta={"source": "pytest"},
    )


# =====================================================
# Ferramentas POSIX
# =====================================================

@pytest.fixture
def require_tools():
    """
    Fixture factory que pula o teste quando algum utilitário não está no PATH.

    Uso:
        def test_x(require_tools):
            require_tools("rev", "tr")
    """
    def _require(*names: str) -> None:
        missing = [n for n in names if shutil.which(n) is None]
        if missing:
            pytest.skip(f"utilitários ausentes no PATH: {', '.join(missing)}")

    return _require
