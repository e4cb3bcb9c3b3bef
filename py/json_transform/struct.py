# Copyright (c) 2025 json-transform contributors. MIT LICENSE.
#
# JSON Transform: Struct
# ======================
#
# Helpers over in-memory JSON-like data (dict, list, str, int, float,
# bool, None). These are the only operations the transformer needs from
# the value model.
#
# - isnode, ismap, islist, iskey: identify value kinds.
# - typify: JSON type name of a value.
# - strkey: normalise a key to its string form.
# - getprop: safely get a property value by key.
# - setprop: safely set a property value by key.
# - delprop: delete a property, shifting list elements down.
# - getpath: get the value at a key path deep inside a node.
# - clone: create a structural copy.
# - merge: merge one value into another, returning the merged value.
# - parse, jsonify: JSON text in and out.
# - stringify, pathify: human-friendly strings for messages.


from typing import Any, List
import json
import re

from .errors import ParseError


# Absent value. JSON null is None, and must stay distinguishable.
class _Undef:
    def __repr__(self):
        return 'UNDEF'

    def __bool__(self):
        return False


UNDEF = _Undef()

S_MT = ''
S_DT = '.'

R_INDEX = re.compile(r'^-?\d+$')

# Merge policy used by the transformer.
MERGE_SETTINGS = {
    'merge_arrays': True,
    'ignore_null': True,
}


def isnode(val: Any = UNDEF) -> bool:
    "Value is a node - a map (dict) or list."
    return isinstance(val, (dict, list))


def ismap(val: Any = UNDEF) -> bool:
    "Value is a map (dict) with string keys."
    return isinstance(val, dict)


def islist(val: Any = UNDEF) -> bool:
    "Value is a list with integer keys (indexes)."
    return isinstance(val, list)


def iskey(key: Any = UNDEF) -> bool:
    "Value is a non-empty string or integer key."
    if isinstance(key, str):
        return len(key) > 0
    # bool is a subclass of int, but never a key.
    if isinstance(key, bool):
        return False
    return isinstance(key, int)


def strkey(key: Any = UNDEF) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, bool):
        return S_MT
    if isinstance(key, int):
        return str(key)
    return S_MT


def _index(val: list, key: Any) -> int:
    """
    Convert key to a list index, or -1 if it does not address an
    existing element. Negative indexes are not resolved.
    """
    if isinstance(key, bool):
        return -1
    if isinstance(key, int):
        i = key
    elif isinstance(key, str) and R_INDEX.match(key):
        i = int(key)
    else:
        return -1
    return i if 0 <= i < len(val) else -1


def getprop(val: Any = UNDEF, key: Any = UNDEF, alt: Any = UNDEF) -> Any:
    """
    Safely get a property of a node. If the node or key is missing,
    return the alternative value (UNDEF by default). A present JSON null
    is returned as None.
    """
    if ismap(val):
        if not iskey(key):
            return alt
        return val.get(strkey(key), alt)

    if islist(val):
        i = _index(val, key)
        return alt if i < 0 else val[i]

    return alt


def typify(val: Any = UNDEF) -> str:
    "JSON type name of a value."
    if val is UNDEF or val is None:
        return 'null'
    if isinstance(val, bool):
        return 'boolean'
    if isinstance(val, (int, float)):
        return 'number'
    if isinstance(val, str):
        return 'string'
    if islist(val):
        return 'array'
    return 'object'


def haskey(val: Any = UNDEF, key: Any = UNDEF) -> bool:
    "Node val has a slot for key (the slot may hold null)."
    return getprop(val, key) is not UNDEF


def items(val: Any = UNDEF):
    "List the entries of a map or list as (key, value) tuples, in order."
    if ismap(val):
        return list(val.items())
    elif islist(val):
        return list(enumerate(val))
    return []


def setprop(parent: Any, key: Any, val: Any) -> bool:
    """
    Set a property on a map, or replace an existing list element.
    Returns False if the slot cannot be written.
    """
    if ismap(parent):
        if not iskey(key):
            return False
        parent[strkey(key)] = val
        return True

    if islist(parent):
        i = _index(parent, key)
        if i < 0:
            return False
        parent[i] = val
        return True

    return False


def delprop(parent: Any, key: Any) -> bool:
    """
    Delete a property from a map or list. For lists, the element at the
    index is removed and later elements shift down. Returns False if
    there was nothing to delete.
    """
    if ismap(parent):
        key = strkey(key)
        if key in parent:
            del parent[key]
            return True
        return False

    if islist(parent):
        i = _index(parent, key)
        if i < 0:
            return False
        del parent[i]
        return True

    return False


def topath(path: Any) -> List[Any]:
    """
    Normalise a path to a list of keys. Strings are split on dots, and
    the empty string is the root.
    """
    if islist(path):
        return list(path)
    if isinstance(path, str):
        return [] if path == S_MT else path.split(S_DT)
    if iskey(path):
        return [path]
    return []


def getpath(store: Any, path: Any) -> Any:
    "Get a value from the store using a key path. Missing parts give UNDEF."
    val = store
    for part in topath(path):
        val = getprop(val, part)
        if val is UNDEF:
            break
    return val


def clone(val: Any = UNDEF) -> Any:
    "Structural copy of a JSON-like value. Scalars are shared."
    if ismap(val):
        return {k: clone(v) for k, v in val.items()}
    if isinstance(val, (list, tuple)):
        return [clone(v) for v in val]
    return val


def merge(target: Any, source: Any, merge_arrays: bool = True,
          ignore_null: bool = True) -> Any:
    """
    Merge source into target and return the merged value. Nodes are
    modified in place; where target cannot hold source (a scalar, or a
    node of the other kind) the result is a clone of source.

    Maps merge key by key; keys missing from target are added, even with
    a null value. Lists merge element by element (or are replaced when
    merge_arrays is False). A map whose keys all address existing
    elements of a target list merges into those elements. Null never
    overwrites when ignore_null is set.
    """
    if ismap(target) and ismap(source):
        for key, sval in source.items():
            if key not in target:
                target[key] = clone(sval)
            else:
                target[key] = merge(target[key], sval, merge_arrays, ignore_null)
        return target

    if islist(target) and islist(source):
        if not merge_arrays:
            target[:] = clone(source)
            return target
        for i, sval in enumerate(source):
            if i < len(target):
                target[i] = merge(target[i], sval, merge_arrays, ignore_null)
            else:
                target.append(clone(sval))
        return target

    # Index keys, e.g. {"1": ...}, address existing list elements.
    if islist(target) and _addresses(target, source):
        for key, sval in source.items():
            i = _index(target, key)
            target[i] = merge(target[i], sval, merge_arrays, ignore_null)
        return target

    if source is None and ignore_null:
        return target

    return clone(source)


def _addresses(target: list, source: Any) -> bool:
    if not ismap(source) or 0 == len(source):
        return False
    return all(0 <= _index(target, key) for key in source)


def same(a: Any, b: Any) -> bool:
    "Structural equality that keeps true and 1 apart, but not 1 and 1.0."
    return _canon(a) == _canon(b)


def _canon(val):
    return json.dumps(_numnorm(val), sort_keys=True, separators=(',', ':'))


def _numnorm(val):
    if isinstance(val, float) and val.is_integer():
        return int(val)
    if ismap(val):
        return {k: _numnorm(v) for k, v in val.items()}
    if islist(val):
        return [_numnorm(v) for v in val]
    return val


def parse(text: str) -> Any:
    "Parse JSON text."
    try:
        return json.loads(text)
    except (TypeError, ValueError) as err:
        raise ParseError(f'Invalid JSON: {err}') from err


def jsonify(val: Any = UNDEF, indent: Any = None) -> str:
    "Serialize a value to JSON text. UNDEF serializes as null."
    if val is UNDEF:
        return 'null'
    return json.dumps(val, indent=indent)


def stringify(val: Any, maxlen: int = None) -> str:
    "Safely stringify a value for messages (NOT JSON!)."
    if val is UNDEF:
        valstr = S_MT
    elif isinstance(val, str):
        valstr = val
    else:
        try:
            valstr = _canon(val).replace('"', '')
        except (TypeError, ValueError):
            valstr = str(val)

    if maxlen is not None and maxlen < len(valstr):
        valstr = valstr[:maxlen - 3] + '...' if 3 < maxlen else valstr[:maxlen]

    return valstr


def pathify(path: Any = UNDEF) -> str:
    "Render a key path as a dotted string."
    if islist(path):
        if 0 == len(path):
            return '<root>'
        return S_DT.join(strkey(p).replace(S_DT, S_MT) for p in path if iskey(p))

    if iskey(path):
        return strkey(path)

    return f'<unknown-path:{stringify(path, 47)}>'
