"""Exception hierarchy for scene compilation and evaluation."""

from __future__ import annotations

from typing import Sequence, Tuple

__all__ = [
    "SceneError",
    "MalformedNode",
    "UnknownOperator",
    "ArityError",
    "EvaluationError",
    "format_path",
]


def format_path(path: Sequence[int]) -> str:
    """Render a tree path as ``root.args[0].args[1]``."""
    return "root" + "".join(f".args[{i}]" for i in path)


class SceneError(ValueError):
    """Base class for every error raised by :mod:`scene2glsl`."""


class MalformedNode(SceneError):
    """A scene record or node does not have the expected structure.

    *path* is the tuple of argument indices leading from the root to the
    offending node.  Node constructors report it relative to the node being
    built; :func:`~scene2glsl.nodes.from_record` prefixes the record path.
    """

    def __init__(self, path: Sequence[int], reason: str) -> None:
        self.path: Tuple[int, ...] = tuple(path)
        self.reason = reason
        super().__init__(f"{format_path(self.path)}: {reason}")


class UnknownOperator(SceneError):
    """An upper-case operator name that the compiler does not implement."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unknown operator {name!r}")


class ArityError(SceneError):
    """An operator received the wrong number of operands."""

    def __init__(self, op: str, arity: int, given: int) -> None:
        self.op = op
        self.arity = arity
        self.given = given
        super().__init__(
            f"Infix operator {op} must have exactly {arity} arguments (got {given})"
        )


class EvaluationError(SceneError):
    """A shader expression could not be evaluated numerically."""
