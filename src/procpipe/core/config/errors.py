# src/procpipe/core/config/errors.py
"""
Exceções canônicas da camada de configuração do procpipe.

Este módulo define a hierarquia oficial de exceções utilizadas durante
a leitura, a sobreposição de camadas e a validação das opções do executor.

As exceções aqui definidas representam **configuração inválida**, e não
falhas de execução de um pipeline (essas vivem em `core.exceptions`).

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção de configuração é levantada depois que um processo foi criado

Limites explícitos:
    - Não executa pipeline
    - Não realiza fallback ou recovery
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do procpipe.

    Permite captura genérica de erros de configuração, distinta das
    falhas de execução (`PipelineError`).
    """


class DefaultsNotFoundError(ConfigError):
    """
    Exceção levantada quando um arquivo de defaults explícito não existe.

    Decisões arquiteturais:
        - Quando o chamador aponta um arquivo de defaults, ele é obrigatório
        - Sem `defaults_path`, os defaults embutidos são usados
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Exceção levantada quando o formato do arquivo de configuração
    não é suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    Exceção levantada quando o conteúdo raiz da configuração
    não é um dicionário (`dict`).
    """


class ConfigTypeConflictError(ConfigError):
    """
    Exceção levantada quando uma seção da configuração não é um mapa.

    Exemplo de conflito:
        - defaults: {"executor": {"encoding": "utf-8"}}
        - camada:   {"executor": "latin-1"}

    Limites explícitos:
        - Não realiza coerção ou conversão de tipos
        - Uma seção `null` não conta como conflito (a camada não a altera)
    """


class InvalidOptionError(ConfigError):
    """
    Exceção levantada quando um valor de opção do executor é inválido.

    Exemplos:
        - `executor.stdin` fora de {"inherit", "null"}
        - `executor.encoding` que não corresponde a nenhum codec conhecido
        - `executor.env` com chaves ou valores que não são strings
    """


class UnknownConfigKeyError(InvalidOptionError):
    """
    Exceção levantada quando uma seção ou chave não pertence ao schema.

    Uma chave com erro de digitação (ex.: `executor.stderrr`) seria
    silenciosamente ignorada; aqui ela é rejeitada.
    """
