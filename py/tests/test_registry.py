
# RUN: python -m unittest discover -s py/tests -k registry

import re
import threading
import unittest

from json_transform import (
    REGISTRY,
    BaseCommand,
    CommandRegistry,
    CopyCommand,
    InvalidRegistrationCode,
    RemoveCommand,
    install_builtins,
    register_transformation,
    transform,
)
from json_transform.commands import BUILTINS
from json_transform.registry import (
    R_COMMAND_KEY,
    S_BUILTIN_PREFIX,
    S_CUSTOM_PREFIX,
    S_SEP,
    builtin_code,
    custom_code,
    parse_key,
)
from json_transform.struct import setprop


class Touch(BaseCommand):
    def apply_to(self, target, context):
        parent, key = self.locate(target)
        setprop(parent, key, self.code)


class TestRegistry(unittest.TestCase):

    def test_registry_parse_key(self):
        self.assertEqual(("$copy", "a"), parse_key("$copy:a"))
        self.assertEqual(("@foo", "a:b"), parse_key("@foo:a:b"))
        self.assertEqual(("$setNull", "x"), parse_key("$setNull:x"))
        self.assertIsNone(parse_key("copy:a"))
        self.assertIsNone(parse_key("$copy"))
        self.assertIsNone(parse_key("$copy:"))
        self.assertIsNone(parse_key("$co1py:a"))
        self.assertIsNone(parse_key("#copy:a"))
        self.assertIsNone(parse_key(1))

    def test_registry_key_syntax_from_constants(self):
        for prefix in [S_BUILTIN_PREFIX, S_CUSTOM_PREFIX]:
            key = prefix + "copy" + S_SEP + "a"
            self.assertEqual((prefix + "copy", "a"), parse_key(key))
            self.assertIn(re.escape(prefix), R_COMMAND_KEY.pattern)
        self.assertIn(re.escape(S_SEP), R_COMMAND_KEY.pattern)
        self.assertEqual(S_BUILTIN_PREFIX + "copy", builtin_code("copy"))
        self.assertEqual(S_CUSTOM_PREFIX + "copy", custom_code("copy"))

    def test_registry_invalid_codes(self):
        registry = CommandRegistry()
        for code in ["Foo1", "Foo", "foo1", "foo-bar", "foo_bar", "", " foo", "fóo", None, 1]:
            with self.assertRaises(InvalidRegistrationCode):
                registry.register(code, Touch)
        self.assertEqual([], registry.codes())

        with self.assertRaises(InvalidRegistrationCode):
            register_transformation("Foo1", Touch)

    def test_registry_invalid_code_is_value_error(self):
        with self.assertRaises(ValueError):
            CommandRegistry().register("UPPER", Touch)

    def test_registry_constructor_must_be_callable(self):
        with self.assertRaises(TypeError):
            CommandRegistry().register("foo", "not a constructor")

    def test_registry_register_and_use(self):
        register_transformation("foo", Touch)
        result = transform({}, {"@foo:a": None})
        self.assertTrue(result.ok)
        self.assertEqual({"a": "@foo"}, result.value)
        self.assertIs(Touch, REGISTRY.lookup("@foo"))

    def test_registry_lookup_is_case_sensitive(self):
        register_transformation("casey", Touch)
        result = transform({}, {"@Casey:a": 1})
        self.assertEqual({"@Casey:a": 1}, result.value)

    def test_registry_install_once(self):
        registry = CommandRegistry()
        self.assertTrue(registry.install(BUILTINS))
        self.assertFalse(registry.install({"other": Touch}))
        self.assertEqual(
            ["$copy", "$foreach", "$remove", "$setnull", "$union"],
            registry.codes())
        self.assertIs(CopyCommand, registry.lookup("$copy"))
        self.assertIsNone(registry.lookup("$other"))
        self.assertIsNone(registry.lookup("copy"))

        install_builtins()
        self.assertFalse(install_builtins())
        self.assertIs(RemoveCommand, REGISTRY.lookup("$remove"))

    def test_registry_custom_and_builtin_codes_are_apart(self):
        registry = CommandRegistry()
        registry.install(BUILTINS)
        registry.register("copy", Touch)
        self.assertIs(CopyCommand, registry.lookup("$copy"))
        self.assertIs(Touch, registry.lookup("@copy"))

    def test_registry_replace_logs_warning(self):
        registry = CommandRegistry()
        registry.register("dup", Touch)
        with self.assertLogs("json_transform.registry", level="WARNING") as cm:
            registry.register("dup", RemoveCommand)
        self.assertIn("@dup", cm.output[0])
        self.assertIs(RemoveCommand, registry.lookup("@dup"))

    def test_registry_create(self):
        registry = CommandRegistry()
        registry.install(BUILTINS)

        self.assertIsNone(registry.create("a", 1, []))
        self.assertIsNone(registry.create("@nope:a", 1, []))

        command = registry.create("$copy:b", "x.y", ["p", 0])
        self.assertIsInstance(command, CopyCommand)
        self.assertEqual("$copy", command.code)
        self.assertEqual("b", command.name)
        self.assertEqual("x.y", command.argument)
        self.assertEqual(["p", 0, "b"], command.target_path)
        self.assertEqual("CopyCommand($copy -> p.0.b)", repr(command))

    def test_registry_concurrent_use(self):
        letters = "abcdefghij"
        errors = []
        results = []

        def registrar(i):
            try:
                for j in letters:
                    register_transformation("conc" + letters[i] + j, Touch)
            except Exception as err:
                errors.append(err)

        def transformer():
            try:
                for _ in range(20):
                    results.append(transform(
                        {"a": [1, 2, 3]},
                        {"$remove:a": None, "$union:b": [1], "@concaa:c": None}))
            except Exception as err:
                errors.append(err)

        threads = [threading.Thread(target=registrar, args=(i,)) for i in range(len(letters))]
        threads += [threading.Thread(target=transformer) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual([], errors)
        self.assertEqual(80, len(results))
        for result in results:
            self.assertTrue(result.ok)
            self.assertEqual([1], result.value["b"])
            self.assertNotIn("a", result.value)
            # Either the data key or the applied command, never anything else.
            self.assertIn(result.value.get("c", result.value.get("@concaa:c")), (None, "@concaa"))

        codes = REGISTRY.codes()
        for i in letters:
            for j in letters:
                self.assertIn("@conc" + i + j, codes)


if __name__ == "__main__":
    unittest.main()
