import unittest

from wikiheaderstats.errors import UnknownNamespaceError
from wikiheaderstats.namespaces import Namespace


class TestNamespace(unittest.TestCase):
    def test_from_code(self):
        for code, expected in [
            ("0", Namespace.MAIN),
            (0, Namespace.MAIN),
            ("-2", Namespace.MEDIA),
            ("10", Namespace.TEMPLATE),
            ("118", Namespace.RECONSTRUCTION),
            ("2303", Namespace.GADGET_DEFINITION_TALK),
        ]:
            with self.subTest(code=code):
                self.assertEqual(expected, Namespace.from_code(code))

    def test_unknown_code(self):
        for code in ["9999", "", "main", None]:
            with self.subTest(code=code):
                with self.assertRaises(UnknownNamespaceError) as cm:
                    Namespace.from_code(code, "some title")
                self.assertEqual(code, cm.exception.code)
                self.assertIn("[[some title]]", str(cm.exception))

    def test_from_name(self):
        for name, expected in [
            ("main", Namespace.MAIN),
            ("", Namespace.MAIN),
            ("(Main)", Namespace.MAIN),
            ("Template", Namespace.TEMPLATE),
            ("user talk", Namespace.USER_TALK),
            ("Gadget-definition", Namespace.GADGET_DEFINITION),
            ("114", Namespace.CITATIONS),
            ("-1", Namespace.SPECIAL),
        ]:
            with self.subTest(name=name):
                self.assertEqual(expected, Namespace.from_name(name))

    def test_unknown_name(self):
        for name in ["Portal", "12345"]:
            with self.subTest(name=name):
                with self.assertRaises(UnknownNamespaceError):
                    Namespace.from_name(name)


if __name__ == "__main__":
    unittest.main()
