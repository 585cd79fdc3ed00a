# src/procpipe/core/pipeline/command.py
"""
Especificações de comando e de pipeline.

Este módulo define os dois tipos de valor que descrevem *o que* executar:

    - Command  → vetor de argumentos já separado (executável + argumentos)
    - Pipeline → sequência ordenada e não vazia de Commands

Ambos são imutáveis e validados na construção: um pipeline vazio ou um
comando vazio nunca chega ao executor.

Princípios fundamentais:
    - Argumentos são repassados literalmente (sem expansão de shell)
    - A ordem do pipeline é a ordem do fluxo de dados (estágio 0 primeiro)
    - Erros de construção são `ConstructionError`, nunca falhas de runtime

Limites explícitos:
    - Não interpreta sintaxe de shell (aspas, globs, redirecionamentos)
    - Não resolve o executável no PATH (isso ocorre no spawn)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence, Tuple, Union

from procpipe.core.exceptions import construction_error


def _validate_argv(value: Any, *, stage: Optional[int] = None) -> Tuple[str, ...]:
    """Normaliza um vetor de argumentos para tupla de strings, ou levanta ConstructionError."""
    where = f"estágio {stage}: " if stage is not None else ""

    if isinstance(value, (str, bytes)):
        # uma string solta seria iterada caractere a caractere
        raise construction_error(
            reason=f"{where}comando deve ser uma sequência de strings, não {type(value).__name__} solta",
            stage=stage,
        )
    try:
        argv = tuple(value)
    except TypeError:
        raise construction_error(
            reason=f"{where}comando deve ser uma sequência, recebido: {type(value).__name__}",
            stage=stage,
        ) from None

    if not argv:
        raise construction_error(reason=f"{where}comando vazio", stage=stage)

    for i, arg in enumerate(argv):
        if not isinstance(arg, str):
            raise construction_error(
                reason=f"{where}argumento {i} deve ser str, recebido: {type(arg).__name__}",
                stage=stage,
            )
        if "\x00" in arg:
            raise construction_error(
                reason=f"{where}argumento {i} contém byte NUL",
                stage=stage,
            )

    return argv


@dataclass(frozen=True)
class Command:
    """
    Especificação de comando: executável seguido de argumentos.

    Invariantes:
        - `argv` é uma tupla não vazia de strings sem bytes NUL
        - `argv[0]` é o executável (nome ou caminho)

    Exemplo:
        >>> Command(["tr", "a-z", "A-Z"]).program
        'tr'
    """

    argv: Tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "argv", _validate_argv(self.argv))

    @property
    def program(self) -> str:
        return self.argv[0]

    @property
    def args(self) -> Tuple[str, ...]:
        return self.argv[1:]

    def __len__(self) -> int:
        return len(self.argv)

    def __iter__(self) -> Iterator[str]:
        return iter(self.argv)

    def __or__(self, other: Any) -> "Pipeline":
        return Pipeline((self,)).pipe(other)

    def __str__(self) -> str:
        return " ".join(self.argv)


def _coerce_command(value: Any, stage: int) -> Command:
    if isinstance(value, Command):
        return value
    return Command(_validate_argv(value, stage=stage))


@dataclass(frozen=True)
class Pipeline:
    """
    Sequência ordenada e não vazia de comandos.

    A saída padrão do estágio i alimenta a entrada padrão do estágio i+1.
    Instâncias são imutáveis: `pipe` e `|` retornam um novo Pipeline.

    Exemplo:
        >>> p = Pipeline.of(["echo", "foo"], ["rev"]) | ["tr", "a-z", "A-Z"]
        >>> len(p)
        3
    """

    commands: Tuple[Command, ...]

    def __post_init__(self) -> None:
        if isinstance(self.commands, (str, bytes, Command)):
            raise construction_error(
                reason="pipeline deve ser uma sequência de comandos"
            )
        try:
            raw = tuple(self.commands)
        except TypeError:
            raise construction_error(
                reason=f"pipeline deve ser uma sequência, recebido: {type(self.commands).__name__}"
            ) from None
        if not raw:
            raise construction_error(reason="pipeline vazio")
        object.__setattr__(
            self, "commands", tuple(_coerce_command(c, i) for i, c in enumerate(raw))
        )

    @classmethod
    def of(cls, *argvs: Union[Command, Sequence[str]]) -> "Pipeline":
        return cls(argvs)

    def pipe(self, other: Union["Pipeline", Command, Sequence[str]]) -> "Pipeline":
        """Retorna um novo Pipeline com `other` anexado ao final."""
        if isinstance(other, Pipeline):
            return Pipeline(self.commands + other.commands)
        return Pipeline(self.commands + (_coerce_command(other, len(self.commands)),))

    __or__ = pipe

    @property
    def argvs(self) -> List[List[str]]:
        return [list(c.argv) for c in self.commands]

    def __len__(self) -> int:
        return len(self.commands)

    def __iter__(self) -> Iterator[Command]:
        return iter(self.commands)

    def __getitem__(self, index: int) -> Command:
        return self.commands[index]

    def __str__(self) -> str:
        return " | ".join(str(c) for c in self.commands)


def as_pipeline(value: Any) -> Pipeline:
    """
    Normaliza a entrada do executor para um `Pipeline`.

    Aceita:
        - Pipeline (retornado como está)
        - Command (pipeline de um estágio)
        - sequência de sequências de strings

    Raises:
        ConstructionError: Se a entrada for vazia ou malformada.
    """
    if isinstance(value, Pipeline):
        return value
    if isinstance(value, Command):
        return Pipeline((value,))
    return Pipeline(value)
