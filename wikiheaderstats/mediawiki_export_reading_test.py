import bz2
import io
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from wikiheaderstats.errors import DumpError
from wikiheaderstats.mediawiki_export_reading import Page, opensesame, pages

DUMP = """<mediawiki xmlns="http://www.mediawiki.org/xml/export-0.11/" version="0.11" xml:lang="en">
  <siteinfo>
    <sitename>Wiktionary</sitename>
  </siteinfo>
  <page>
    <title>dictionary</title>
    <ns>0</ns>
    <id>1</id>
    <revision>
      <id>2</id>
      <model>wikitext</model>
      <format>text/x-wiki</format>
      <text bytes="28" xml:space="preserve">==English==
===Noun===
&lt;b&gt;</text>
    </revision>
  </page>
  <page>
    <title>Template:empty</title>
    <ns>10</ns>
    <id>3</id>
    <revision>
      <id>4</id>
      <model>wikitext</model>
      <format>text/x-wiki</format>
      <text bytes="0" xml:space="preserve" />
    </revision>
  </page>
</mediawiki>
"""

EXPECTED = [
    Page("dictionary", "0", "wikitext", "text/x-wiki", "==English==\n===Noun===\n<b>"),
    Page("Template:empty", "10", "wikitext", "text/x-wiki", ""),
]


class TestPages(unittest.TestCase):
    def test_pages(self):
        self.assertEqual(EXPECTED, list(pages(io.BytesIO(DUMP.encode("utf-8")))))

    def test_older_export_version(self):
        dump = DUMP.replace("export-0.11", "export-0.10")
        self.assertEqual(EXPECTED, list(pages(io.BytesIO(dump.encode("utf-8")))))

    def test_malformed_dump(self):
        broken = DUMP[: DUMP.index("</revision>")] + "</page>"
        with self.assertRaises(DumpError):
            list(pages(io.BytesIO(broken.encode("utf-8"))))

    def test_other_xml_has_no_pages(self):
        self.assertEqual([], list(pages(io.BytesIO(b"<page><title>x</title></page>"))))


class TestOpensesame(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def test_plain(self):
        path = Path(self.tmpdir.name) / "dump.xml"
        path.write_text(DUMP, encoding="utf-8")
        with opensesame(path) as inf:
            self.assertEqual(EXPECTED, list(pages(inf)))

    def test_bz2(self):
        path = Path(self.tmpdir.name) / "dump.xml.bz2"
        path.write_bytes(bz2.compress(DUMP.encode("utf-8")))
        with opensesame(path) as inf:
            self.assertEqual(EXPECTED, list(pages(inf)))

    def test_plain_file_closes_bz2_reader(self):
        path = Path(self.tmpdir.name) / "dump.xml"
        path.write_text(DUMP, encoding="utf-8")
        real_open = bz2.open
        readers = []

        def open_and_keep(*args, **kwargs):
            reader = real_open(*args, **kwargs)
            readers.append(reader)
            return reader

        with mock.patch("bz2.open", open_and_keep):
            with opensesame(path) as inf:
                self.assertEqual(EXPECTED, list(pages(inf)))
        self.assertEqual(1, len(readers))
        self.assertTrue(readers[0].closed)

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            opensesame(Path(self.tmpdir.name) / "missing.xml")


if __name__ == "__main__":
    unittest.main()
