"""
scene2glsl — SDF Scene Expression Compiler
==========================================

Compiles small scene trees built from 2-D signed distance primitives,
geometric transforms and boolean combinators into a single scalar GLSL
expression over a query point.

Implemented features
--------------------
- Scene AST and record I/O: :func:`from_record`, :func:`to_record`, :func:`fuse`
- Compiler: :func:`compile_scene` (transforms, booleans, smooth booleans)
- Numeric evaluation of generated text: :func:`evaluate`
- Grid sampling: :func:`sample_levelset_2d`
- Shader assembly: :func:`fragment_source`
- Generic GLSL notation for record trees: :func:`to_glsl`

Quick start
-----------

::

    from scene2glsl import compile_scene, sample_levelset_2d

    scene = {
        "op": "UNITE",
        "args": [
            {"op": "circle", "args": ["0.5"]},
            {"op": "TRANSLATE", "args": ["vec2(0.6, 0.0)",
                                         {"op": "plainBox", "args": ["vec2(0.2, 0.2)"]}]},
        ],
    }
    compiled = compile_scene(scene)
    compiled("center")
    # 'min(circle(center, 0.5), plainBox(center - vec2(0.6, 0.0), vec2(0.2, 0.2)))'

    phi = sample_levelset_2d(compiled, ((-1.0, 1.0), (-1.0, 1.0)), (256, 256))
"""

from .errors import (
    SceneError,
    MalformedNode,
    UnknownOperator,
    ArityError,
    EvaluationError,
)

from .nodes import (
    TransformKind,
    BooleanKind,
    AtomCall,
    Constant,
    Transform,
    BooleanOp,
    Unknown,
    SceneNode,
    from_record,
    to_record,
    fuse,
    walk,
    depth,
)

from .formatting import format_scalar, format_fixed

from .compiler import (
    CompiledExpression,
    UnresolvedOperator,
    compile_scene,
)

from .evaluate import evaluate, parse_expression
from .grid import sample_levelset_2d, save_npy
from .notation import to_glsl
from .shader import fragment_source

__version__ = "0.1.0"

__all__ = [
    # Errors
    "SceneError", "MalformedNode", "UnknownOperator", "ArityError", "EvaluationError",
    # AST
    "TransformKind", "BooleanKind",
    "AtomCall", "Constant", "Transform", "BooleanOp", "Unknown", "SceneNode",
    "from_record", "to_record", "fuse", "walk", "depth",
    # Formatting
    "format_scalar", "format_fixed",
    # Compiler
    "CompiledExpression", "UnresolvedOperator", "compile_scene",
    # Evaluation / sampling
    "evaluate", "parse_expression", "sample_levelset_2d", "save_npy",
    # Text output
    "to_glsl", "fragment_source",
]
