import doctest
import unittest

from wikiheaderstats import header_stats, namespaces, wikinodes


class TestDocstrings(unittest.TestCase):
    def test_examples(self):
        for module in [header_stats, namespaces, wikinodes]:
            with self.subTest(module=module.__name__):
                results = doctest.testmod(module)
                self.assertGreater(results.attempted, 0)
                self.assertEqual(0, results.failed)


if __name__ == "__main__":
    unittest.main()
