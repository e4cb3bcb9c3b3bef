# Copyright (c) 2025 json-transform contributors. MIT LICENSE.
#
# JSON Transform: Registry
# ========================
#
# Maps formatted command codes to command constructors, and turns
# transformation document keys into bound commands.
#
# A command key has the form <prefix><code>:<name>. Shipped commands use
# the `$` prefix and custom commands the `@` prefix, so a custom code may
# reuse a shipped name:
#
#   { "$remove:b": null, "@upper:title": null }


from logging import getLogger
from typing import Any, Callable, Dict, List, Mapping, Optional
import re
import threading

from .errors import InvalidRegistrationCode


log = getLogger(__name__)

S_BUILTIN_PREFIX = '$'
S_CUSTOM_PREFIX = '@'
S_SEP = ':'

R_COMMAND_KEY = re.compile(
    '^(' + re.escape(S_BUILTIN_PREFIX) + '|' + re.escape(S_CUSTOM_PREFIX) + ')'
    + '([A-Za-z]+)' + re.escape(S_SEP) + '(.+)$')
R_CUSTOM_CODE = re.compile(r'^[a-z]+$')


class CreateContext:
    """
    Everything a command constructor gets to know about the key it was
    found under.
    """
    def __init__(
        self,
        code: str,               # Formatted code, e.g. `$copy`.
        key: str,                # Full property key in the document.
        name: str,               # Target property name.
        value: Any,              # Property value: the command arguments.
        target_path: List[Any],  # Path of the targeted node.
    ) -> None:
        self.code = code
        self.key = key
        self.name = name
        self.value = value
        self.target_path = target_path


Constructor = Callable[[CreateContext], Any]


def builtin_code(code: str) -> str:
    return S_BUILTIN_PREFIX + code


def custom_code(code: str) -> str:
    return S_CUSTOM_PREFIX + code


def parse_key(key: Any):
    "Split a command key into (formatted code, name), or None for data keys."
    if not isinstance(key, str):
        return None
    m = R_COMMAND_KEY.match(key)
    if m is None:
        return None
    return m.group(1) + m.group(2), m.group(3)


class CommandRegistry:
    """
    Thread-safe map of formatted code to constructor. Lookups may run
    while other threads register new codes.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._ctors: Dict[str, Constructor] = {}
        self._installed = False

    def register(self, code: str, constructor: Constructor) -> None:
        """Register a custom command under `@<code>`."""
        if not isinstance(code, str) or not R_CUSTOM_CODE.match(code):
            raise InvalidRegistrationCode(
                f'Invalid command code {code!r}: only lowercase letters are allowed.')
        if not callable(constructor):
            raise TypeError(f'Command constructor for {code!r} is not callable.')

        fcode = custom_code(code)
        with self._lock:
            if fcode in self._ctors:
                log.warning('Replacing custom command %s', fcode)
            self._ctors[fcode] = constructor
        log.debug('Registered custom command %s', fcode)

    def register_builtin(self, code: str, constructor: Constructor) -> None:
        with self._lock:
            self._ctors[builtin_code(code)] = constructor

    def install(self, builtins: Mapping[str, Constructor]) -> bool:
        """
        Install the built-in commands once. Later calls do nothing and
        return False.
        """
        with self._lock:
            if self._installed:
                return False
            for code, ctor in builtins.items():
                self.register_builtin(code, ctor)
            self._installed = True
        log.debug('Installed built-in commands: %s', ', '.join(sorted(builtins)))
        return True

    def lookup(self, fcode: str) -> Optional[Constructor]:
        with self._lock:
            return self._ctors.get(fcode)

    def codes(self) -> List[str]:
        with self._lock:
            return sorted(self._ctors)

    def create(self, key: Any, value: Any, path: List[Any]):
        """
        Build the command for a document property, or return None if the
        property is ordinary data.
        """
        parsed = parse_key(key)
        if parsed is None:
            return None

        fcode, name = parsed
        ctor = self.lookup(fcode)
        if ctor is None:
            return None

        return ctor(CreateContext(
            code=fcode,
            key=key,
            name=name,
            value=value,
            target_path=path + [name],
        ))


# Process-wide registry used by `transform`.
REGISTRY = CommandRegistry()
