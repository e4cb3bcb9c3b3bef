# Copyright (c) 2025 json-transform contributors. MIT LICENSE.
#
# JSON Transform: Transformer
# ===========================
#
# Apply a transformation document to a source document. The
# transformation has the same shape as the data it edits, with command
# keys at the places to edit:
#
#   source:          { "a": 1, "b": [1, 2, 3], "c": { "d": 4 } }
#   transformation:  { "$remove:b": null, "c": { "e": 5 }, "$copy:f": "c.d" }
#   result:          { "a": 1, "c": { "d": 4, "e": 5 }, "f": 4 }
#
# A transform runs in three phases:
# 1. Walk: find command keys (depth first, document order), replacing
#    each with a null slot named after its target. Command values are
#    arguments and are not walked.
# 2. Merge: merge the walked transformation into a clone of the source.
#    Nulls do not overwrite data, so every target slot exists afterwards.
# 3. Apply: run the commands last-found-first against the merged result.
#    A failing command records an error and the rest still run.


from logging import getLogger
from typing import Any, Dict, List, Optional

from .commands import BUILTINS
from .errors import PathError, TransformError
from .registry import REGISTRY, CommandRegistry, Constructor, parse_key
from .struct import (
    MERGE_SETTINGS,
    clone,
    islist,
    ismap,
    jsonify,
    merge,
    parse,
    pathify,
)


log = getLogger(__name__)


def install_builtins(registry: CommandRegistry = REGISTRY) -> bool:
    "Install the built-in commands. Calls after the first do nothing."
    return registry.install(BUILTINS)


class InvocationContext:
    """
    State shared by all commands of one transform call: the original
    source document, caller state, and the error sink. Nested foreach
    transforms get a child context that shares the sink and prefixes
    error paths.
    """

    def __init__(
        self,
        source: Any,
        state: Optional[Dict[str, Any]] = None,
        errors: Optional[List[PathError]] = None,
        base_path: Optional[List[Any]] = None,
        registry: CommandRegistry = REGISTRY,
    ) -> None:
        self.source = source
        self.state = {} if state is None else state
        self.errors = [] if errors is None else errors
        self.base_path = [] if base_path is None else base_path
        self.registry = registry

    def error(self, path: List[Any], message: str, kind: str = TransformError.__name__) -> None:
        entry = PathError(self.base_path + list(path), message, kind)
        log.debug('Transform error at %s', entry)
        self.errors.append(entry)

    def child(self, source: Any, path: List[Any]) -> 'InvocationContext':
        return InvocationContext(
            source,
            state=self.state,
            errors=self.errors,
            base_path=self.base_path + list(path),
            registry=self.registry,
        )

    def transform(self, source: Any, transformation: Any, path: List[Any]) -> Any:
        "Transform a sub-document found at `path`, returning the new value."
        return _run(source, transformation, self.child(source, path))


class TransformationResult:
    "Transformed document plus the errors recorded on the way."

    def __init__(self, value: Any, errors: List[PathError]) -> None:
        self.value = value
        self.errors = errors

    @property
    def ok(self) -> bool:
        return 0 == len(self.errors)

    def to_json(self, indent: Any = None) -> str:
        return jsonify(self.value, indent)

    def __repr__(self) -> str:
        return f'TransformationResult(value={self.value!r}, errors={self.errors!r})'


def collect(transformation: Any, registry: CommandRegistry = REGISTRY):
    """
    Walk a transformation document and find its commands.
    Returns (walked copy of the document, commands in discovery order).
    """
    commands = []
    walked = _walk(transformation, [], commands, registry)
    return walked, commands


def _walk(node, path, commands, registry):
    if ismap(node):
        out = {}
        for key, val in node.items():
            command = registry.create(key, val, path)
            if command is None:
                out[key] = _walk(val, path + [key], commands, registry)
            else:
                # Command value is an argument: stop here, and leave a null
                # slot for the target unless data already filled it.
                commands.append(command)
                _, name = parse_key(key)
                log.debug('Found command %s at %s', key, pathify(path + [name]))
                if name not in out:
                    out[name] = None
        return out

    if islist(node):
        return [_walk(item, path + [i], commands, registry) for i, item in enumerate(node)]

    return node


def _apply(commands, result, context):
    count = len(commands)
    while commands:
        command = commands.pop()
        try:
            command.apply_to(result, context)
        except TransformError as err:
            path = err.path if err.path is not None else getattr(command, 'target_path', [])
            context.error(path, err.message, type(err).__name__)
    log.debug('Applied %d commands at %s', count, pathify(context.base_path))


def _run(source, transformation, context):
    result = clone(source)
    walked, commands = collect(transformation, context.registry)
    result = merge(result, walked, **MERGE_SETTINGS)
    _apply(commands, result, context)
    return result


def transform(
        source: Any,
        transformation: Any,
        state: Optional[Dict[str, Any]] = None,
        registry: Optional[CommandRegistry] = None,
) -> TransformationResult:
    """
    Transform a source document. Neither argument is modified. Failing
    commands do not stop the transform; see `TransformationResult.errors`.
    """
    registry = REGISTRY if registry is None else registry
    install_builtins(registry)

    context = InvocationContext(source, state=state, registry=registry)
    value = _run(source, transformation, context)

    return TransformationResult(value, context.errors)


def transform_json(
        source: str,
        transformation: str,
        state: Optional[Dict[str, Any]] = None,
        registry: Optional[CommandRegistry] = None,
) -> TransformationResult:
    "Transform JSON text. Raises ParseError before any work if either is invalid."
    source_doc = parse(source)
    transformation_doc = parse(transformation)
    return transform(source_doc, transformation_doc, state, registry)


def register_transformation(code: str, constructor: Constructor) -> None:
    """
    Register a custom command. Use it in a transformation as
    `@<code>:<name>`. Raises InvalidRegistrationCode unless the code is
    made of lowercase letters only.
    """
    install_builtins()
    REGISTRY.register(code, constructor)
