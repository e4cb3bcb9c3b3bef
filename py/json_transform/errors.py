# Copyright (c) 2025 json-transform contributors. MIT LICENSE.

from typing import Any, List, NamedTuple, Optional


class TransformError(Exception):
    """
    Base error. When raised by a command, the applier records it against
    `path` (or the command's target path) instead of propagating it.
    """
    def __init__(self, message: str, path: Optional[List[Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path


class ParseError(TransformError, ValueError):
    "Input text is not valid JSON."


class InvalidRegistrationCode(TransformError, ValueError):
    "A custom command code is not made of lowercase letters only."


class PathResolutionError(TransformError):
    "A target path or argument path does not resolve."


class ShapeMismatchError(TransformError):
    "Command operands are structurally incompatible."


class PathError(NamedTuple):
    path: List[Any]
    message: str
    kind: str = TransformError.__name__

    def __str__(self) -> str:
        # Local import: struct imports this module.
        from .struct import pathify
        return f'{pathify(self.path)}: {self.message}'
