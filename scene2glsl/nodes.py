"""Scene AST: immutable nodes describing a 2-D SDF scene.

A scene is a tree whose leaves are calls to primitive distance functions
(:class:`AtomCall`) and whose interior nodes are unary geometric transforms
(:class:`Transform`) or binary boolean combinators (:class:`BooleanOp`).

Trees usually arrive as plain serializable records produced by the editor::

    {"op": "ROTATE", "args": ["20.0", {"op": "circle", "args": ["0.5"]}]}

:func:`from_record` turns such a record into nodes and :func:`to_record`
goes back.  The operator keywords are the fixed, upper-case members of
:class:`TransformKind` and :class:`BooleanKind`; lower-case names are
primitives; any other name becomes :class:`Unknown`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence, Tuple, Union

from .errors import MalformedNode
from .formatting import Numeric, format_scalar, is_numeric

__all__ = [
    "TransformKind", "BooleanKind",
    "AtomCall", "Constant", "Transform", "BooleanOp", "Unknown", "SceneNode",
    "from_record", "to_record", "fuse", "walk", "depth",
    "is_atom_name", "is_keyword",
]


# ===========================================================================
# Operator keywords
# ===========================================================================

class TransformKind(str, Enum):
    NOOP = "NOOP"
    TRANSLATE = "TRANSLATE"
    ROTATE = "ROTATE"
    SCALE = "SCALE"
    HOLLOW = "HOLLOW"
    MELT = "MELT"
    BEND = "BEND"
    DISPLACE = "DISPLACE"

    @property
    def scalar(self) -> bool:
        """True if the parameter is a number rendered with three decimals."""
        return self not in (TransformKind.NOOP, TransformKind.TRANSLATE)


class BooleanKind(str, Enum):
    UNITE = "UNITE"
    SUBTRACT = "SUBTRACT"
    INTERSECT = "INTERSECT"
    SMUNITE = "SMUNITE"
    SMUTRACT = "SMUTRACT"
    SMUSECT = "SMUSECT"

    @property
    def smooth(self) -> bool:
        return self.value.startswith("SM")


_KEYWORDS = frozenset(k.value for k in TransformKind) | frozenset(k.value for k in BooleanKind)


def is_atom_name(op: str) -> bool:
    """Primitive names start with a lower-case letter."""
    return bool(op) and op[0].isalpha() and op[0].islower()


def is_keyword(op: str) -> bool:
    return op in _KEYWORDS


# ===========================================================================
# Nodes
# ===========================================================================

@dataclass(frozen=True)
class AtomCall:
    """Call of an externally defined primitive: ``name(x, *args)``."""

    name: str
    args: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not is_atom_name(self.name):
            raise MalformedNode((), f"primitive name {self.name!r} must start with a lower-case letter")
        object.__setattr__(self, "args", tuple(self.args))


@dataclass(frozen=True)
class Constant:
    """Coordinate-independent literal, e.g. a constant blend radius."""

    text: str


@dataclass(frozen=True)
class Transform:
    """Unary transform applied to exactly one child."""

    kind: TransformKind
    params: Tuple[Any, ...]
    child: "SceneNode"

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", TransformKind(self.kind))
        object.__setattr__(self, "params", tuple(self.params))
        if not isinstance(self.child, _NODE_TYPES):
            raise MalformedNode((1,), f"{self.kind.value} child must be a scene node")
        if len(self.params) != 1:
            raise MalformedNode((), f"{self.kind.value} takes one parameter, got {len(self.params)}")
        if self.kind.scalar and not is_numeric(self.params[0]):
            raise MalformedNode((0,), f"{self.kind.value} parameter must be numeric, got {self.params[0]!r}")

    @property
    def param(self) -> Any:
        return self.params[0]


@dataclass(frozen=True)
class BooleanOp:
    """Binary combinator; smooth kinds also carry a *blend* radius node."""

    kind: BooleanKind
    left: "SceneNode"
    right: "SceneNode"
    blend: Optional["SceneNode"] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", BooleanKind(self.kind))
        for i, (label, operand) in enumerate((("left", self.left), ("right", self.right))):
            if not isinstance(operand, _NODE_TYPES):
                raise MalformedNode((i,), f"{self.kind.value} {label} operand must be a scene node")
        if self.kind.smooth and not isinstance(self.blend, _NODE_TYPES):
            raise MalformedNode((2,), f"{self.kind.value} requires a blend radius node")
        if not self.kind.smooth and self.blend is not None:
            raise MalformedNode((2,), f"{self.kind.value} does not take a blend radius")


@dataclass(frozen=True)
class Unknown:
    """An operator name outside the fixed keyword set."""

    name: str
    args: Tuple["SceneNode", ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))


SceneNode = Union[AtomCall, Constant, Transform, BooleanOp, Unknown]
_NODE_TYPES = (AtomCall, Constant, Transform, BooleanOp, Unknown)


# ===========================================================================
# Records
# ===========================================================================

def _literal(value: Any, path: Tuple[int, ...], what: str) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and is_numeric(value):
        return format_scalar(value)
    raise MalformedNode(path, f"{what} must be text or a finite number, got {value!r}")


def _construct(cls: Any, path: Tuple[int, ...], *fields: Any) -> SceneNode:
    """Build a node, re-rooting constructor errors at *path*."""
    try:
        return cls(*fields)
    except MalformedNode as exc:
        raise MalformedNode(path + exc.path, exc.reason) from None


def _child(value: Any, path: Tuple[int, ...]) -> SceneNode:
    if not isinstance(value, (Mapping,) + _NODE_TYPES):
        raise MalformedNode(path, f"expected a node record, got {value!r}")
    return from_record(value, path)


def from_record(record: Mapping[str, Any], path: Sequence[int] = ()) -> SceneNode:
    """Build a :data:`SceneNode` tree from ``{"op": ..., "args": [...]}``.

    Raises :class:`~scene2glsl.errors.MalformedNode` naming the *path* of the
    first structural problem.
    """
    path = tuple(path)
    if isinstance(record, _NODE_TYPES):
        return record
    if not isinstance(record, Mapping):
        raise MalformedNode(path, f"expected a node record, got {record!r}")
    op = record.get("op")
    if not isinstance(op, str) or not op:
        raise MalformedNode(path, f"missing or invalid 'op': {op!r}")
    if "args" not in record:
        raise MalformedNode(path, f"{op} record has no 'args'")
    args = record["args"]
    if isinstance(args, (str, bytes)) or not isinstance(args, Sequence):
        raise MalformedNode(path, f"'args' of {op} must be a list")
    args = list(args)

    if is_atom_name(op):
        literals = tuple(_literal(a, path + (i,), f"argument of {op}") for i, a in enumerate(args))
        return _construct(AtomCall, path, op, literals)

    if op in TransformKind.__members__:
        kind = TransformKind(op)
        if len(args) != 2:
            raise MalformedNode(path, f"{op} takes [param, child], got {len(args)} args")
        param, child = args
        if kind is TransformKind.TRANSLATE:
            param = _literal(param, path + (0,), "TRANSLATE offset")
        return _construct(Transform, path, kind, (param,), _child(child, path + (1,)))

    if op in BooleanKind.__members__:
        kind = BooleanKind(op)
        expected = 3 if kind.smooth else 2
        if len(args) != expected:
            raise MalformedNode(path, f"{op} takes {expected} operands, got {len(args)}")
        left = _child(args[0], path + (0,))
        right = _child(args[1], path + (1,))
        blend = None
        if kind.smooth:
            k = args[2]
            if isinstance(k, (Mapping,) + _NODE_TYPES):
                blend = from_record(k, path + (2,))
            else:
                blend = Constant(_literal(k, path + (2,), f"{op} blend radius"))
        return _construct(BooleanOp, path, kind, left, right, blend)

    operands = []
    for i, a in enumerate(args):
        if isinstance(a, (Mapping,) + _NODE_TYPES):
            operands.append(from_record(a, path + (i,)))
        else:
            operands.append(Constant(_literal(a, path + (i,), f"argument of {op}")))
    return Unknown(op, tuple(operands))


def to_record(node: SceneNode) -> Dict[str, Any]:
    """Inverse of :func:`from_record`."""
    if isinstance(node, AtomCall):
        return {"op": node.name, "args": list(node.args)}
    if isinstance(node, Transform):
        param = node.param
        if node.kind.scalar:
            param = format_scalar(param)
        return {"op": node.kind.value, "args": [param, to_record(node.child)]}
    if isinstance(node, BooleanOp):
        args = [to_record(node.left), to_record(node.right)]
        if node.blend is not None:
            args.append(node.blend.text if isinstance(node.blend, Constant) else to_record(node.blend))
        return {"op": node.kind.value, "args": args}
    if isinstance(node, Unknown):
        return {
            "op": node.name,
            "args": [a.text if isinstance(a, Constant) else to_record(a) for a in node.args],
        }
    if isinstance(node, Constant):
        raise MalformedNode((), f"constant {node.text!r} only appears as an operand")
    raise MalformedNode((), f"not a scene node: {node!r}")


# ===========================================================================
# Tree utilities
# ===========================================================================

def _children(node: SceneNode) -> Tuple[SceneNode, ...]:
    if isinstance(node, Transform):
        return (node.child,)
    if isinstance(node, BooleanOp):
        return tuple(n for n in (node.left, node.right, node.blend) if n is not None)
    if isinstance(node, Unknown):
        return node.args
    return ()


def walk(node: SceneNode) -> Iterator[SceneNode]:
    """Pre-order iteration over *node* and its descendants."""
    yield node
    for child in _children(node):
        yield from walk(child)


def depth(node: SceneNode) -> int:
    """Number of nodes on the longest root-to-leaf path."""
    return 1 + max((depth(c) for c in _children(node)), default=0)


def fuse(primary: SceneNode, secondary: SceneNode, offset: Tuple[Numeric, Numeric]) -> BooleanOp:
    """Union *primary* with *secondary* moved by *offset*.

    This is how the editor merges two value trees that meet on the canvas:
    ``UNITE(primary, TRANSLATE(vec2(dx, dy), secondary))``.
    """
    dx, dy = (format_scalar(v) for v in offset)
    moved = Transform(TransformKind.TRANSLATE, (f"vec2({dx}, {dy})",), secondary)
    return BooleanOp(BooleanKind.UNITE, primary, moved)
