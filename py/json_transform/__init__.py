# json_transform init

import logging

from .commands import (
    BaseCommand,
    CopyCommand,
    ForEachCommand,
    RemoveCommand,
    SetNullCommand,
    UnionCommand,
)
from .errors import (
    InvalidRegistrationCode,
    ParseError,
    PathError,
    PathResolutionError,
    ShapeMismatchError,
    TransformError,
)
from .registry import (
    REGISTRY,
    CommandRegistry,
    CreateContext,
)
from .transformer import (
    InvocationContext,
    TransformationResult,
    collect,
    install_builtins,
    register_transformation,
    transform,
    transform_json,
)


logging.getLogger(__name__).addHandler(logging.NullHandler())


__all__ = [
    'BaseCommand',
    'CommandRegistry',
    'CopyCommand',
    'CreateContext',
    'ForEachCommand',
    'InvalidRegistrationCode',
    'InvocationContext',
    'ParseError',
    'PathError',
    'PathResolutionError',
    'REGISTRY',
    'RemoveCommand',
    'SetNullCommand',
    'ShapeMismatchError',
    'TransformError',
    'TransformationResult',
    'UnionCommand',
    'collect',
    'install_builtins',
    'register_transformation',
    'transform',
    'transform_json',
]
