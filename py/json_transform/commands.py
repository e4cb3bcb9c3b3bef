# Copyright (c) 2025 json-transform contributors. MIT LICENSE.
#
# JSON Transform: Commands
# ========================
#
# Built-in commands. Each is bound to a target path when the walker
# finds its key, and applied later to the merged result document.
#
# - copy: copy a node from the source document.
# - foreach: transform each child of an array or object.
# - remove: delete the target node.
# - setnull: set the target node to null.
# - union: combine the target node with the argument.


from typing import Any, List

from .errors import PathResolutionError, ShapeMismatchError
from .struct import (
    UNDEF,
    clone,
    delprop,
    getpath,
    getprop,
    haskey,
    islist,
    ismap,
    isnode,
    items,
    pathify,
    same,
    setprop,
    topath,
    typify,
)


class BaseCommand:
    """
    Base for commands. Subclasses implement `apply_to(target, context)`,
    where `target` is the whole result document and `context` is the
    shared invocation context. Failures are raised as `TransformError`
    subclasses, or recorded with `context.error(...)`.
    """

    def __init__(self, context) -> None:
        self.code = context.code
        self.name = context.name
        self.argument = context.value
        self.target_path: List[Any] = list(context.target_path)

    def apply_to(self, target: Any, context) -> None:
        raise NotImplementedError

    def locate(self, target: Any):
        "Resolve the parent node and key holding the target slot."
        parent = getpath(target, self.target_path[:-1])
        key = self.target_path[-1]
        if not isnode(parent) or not haskey(parent, key):
            raise PathResolutionError(
                f'Path {pathify(self.target_path)} does not exist.', self.target_path)
        return parent, key

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.code} -> {pathify(self.target_path)})'


class CopyCommand(BaseCommand):
    "Write a clone of a source document node at the target path."

    def apply_to(self, target, context):
        srcpath = self.argument
        if not isinstance(srcpath, (str, list)):
            raise ShapeMismatchError(
                f'Copy source path must be a string or list, not {typify(srcpath)}.',
                self.target_path)

        found = getpath(context.source, srcpath)
        if found is UNDEF:
            raise PathResolutionError(
                f'Source path {pathify(topath(srcpath))} does not exist.', self.target_path)

        parent, key = self.locate(target)
        setprop(parent, key, clone(found))


class ForEachCommand(BaseCommand):
    """
    Apply the argument transformation to each child of the target array
    or object, with the child as the source. Errors from a child are
    reported under the child's path.
    """

    def apply_to(self, target, context):
        if not isnode(self.argument):
            raise ShapeMismatchError(
                f'Foreach transformation must be an object or array, not {typify(self.argument)}.',
                self.target_path)

        parent, key = self.locate(target)
        node = getprop(parent, key)
        if not isnode(node):
            raise ShapeMismatchError(
                f'Cannot iterate over {typify(node)} at {pathify(self.target_path)}.',
                self.target_path)

        for ckey, child in items(node):
            node[ckey] = context.transform(child, self.argument, self.target_path + [ckey])


class RemoveCommand(BaseCommand):
    "Delete the target node. List elements after it shift down."

    def apply_to(self, target, context):
        parent, key = self.locate(target)
        delprop(parent, key)


class SetNullCommand(BaseCommand):
    "Set the value held at the target path to null."

    def apply_to(self, target, context):
        parent, key = self.locate(target)
        if isnode(getprop(parent, key)):
            raise ShapeMismatchError(
                f'Cannot set {typify(getprop(parent, key))} at '
                f'{pathify(self.target_path)} to null: not a value.',
                self.target_path)
        setprop(parent, key, None)


class UnionCommand(BaseCommand):
    """
    Combine the target node with the argument. Arrays gain the argument
    elements they do not already hold; objects take the argument keys,
    the argument winning on conflicts. A null target becomes the argument.
    """

    def apply_to(self, target, context):
        parent, key = self.locate(target)
        node = getprop(parent, key)
        arg = self.argument

        if node is None:
            setprop(parent, key, clone(arg))

        elif islist(node) and islist(arg):
            for item in arg:
                if not any(same(item, have) for have in node):
                    node.append(clone(item))

        elif ismap(node) and ismap(arg):
            for akey, aval in arg.items():
                node[akey] = clone(aval)

        else:
            raise ShapeMismatchError(
                f'Cannot union {typify(node)} with {typify(arg)} at {pathify(self.target_path)}.',
                self.target_path)


BUILTINS = {
    'copy': CopyCommand,
    'foreach': ForEachCommand,
    'remove': RemoveCommand,
    'setnull': SetNullCommand,
    'union': UnionCommand,
}
