import os
import tempfile
import unittest

from pdfgate.bridge import ARGUMENT_ERROR, ENGINE_ERROR, OK, DiagnosticBuffer
from pdfgate.document import count_pages, drop_document, open_document
from pdfgate.gateway import drop_context, new_context
from samples import make_png, make_text_pdf


class TestOpenDocument(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.gateway = new_context()
        self.sample_pdf = make_text_pdf(
            os.path.join(self.tmp.name, "sample.pdf"), ["one", "two", "three"]
        )

    def tearDown(self):
        drop_context(self.gateway)
        self.tmp.cleanup()

    def test_missing_file(self):
        diag = DiagnosticBuffer(256)
        code, doc = open_document(self.gateway, os.path.join(self.tmp.name, "missing.pdf"), diag)
        self.assertEqual(code, ENGINE_ERROR)
        self.assertIsNone(doc)
        self.assertFalse(diag.is_empty())
        self.assertEqual(self.gateway.live_resources(), {})

    def test_empty_file(self):
        junk = os.path.join(self.tmp.name, "empty.pdf")
        open(junk, "wb").close()
        diag = DiagnosticBuffer(256)
        code, doc = open_document(self.gateway, junk, diag)
        self.assertEqual(code, ENGINE_ERROR)
        self.assertIsNone(doc)
        self.assertFalse(diag.is_empty())

    def test_empty_path(self):
        diag = DiagnosticBuffer(64)
        code, doc = open_document(self.gateway, "", diag)
        self.assertEqual(code, ENGINE_ERROR)
        self.assertIsNone(doc)
        self.assertIn("cannot open file", diag.message)
        self.assertEqual(self.gateway.live_resources(), {})

    def test_zero_capacity_diagnostic(self):
        diag = DiagnosticBuffer(0)
        missing = os.path.join(self.tmp.name, "missing.pdf")
        self.assertEqual(open_document(self.gateway, missing, diag), (ENGINE_ERROR, None))
        self.assertEqual(diag.raw, bytearray())
        self.assertEqual(self.gateway.live_resources(), {})

    def test_missing_arguments(self):
        diag = DiagnosticBuffer(256)
        self.assertEqual(open_document(None, self.sample_pdf, diag), (ARGUMENT_ERROR, None))
        self.assertEqual(open_document(self.gateway, None, diag), (ARGUMENT_ERROR, None))
        self.assertTrue(diag.is_empty())

    def test_dropped_gateway_is_missing(self):
        other = new_context()
        drop_context(other)
        code, doc = open_document(other, self.sample_pdf)
        self.assertEqual(code, ARGUMENT_ERROR)
        self.assertIsNone(doc)

    def test_count_pages(self):
        code, doc = open_document(self.gateway, self.sample_pdf)
        self.assertEqual(code, OK)
        self.assertEqual(count_pages(self.gateway, doc), (OK, 3))
        self.assertEqual(count_pages(self.gateway, doc), (OK, 3))
        drop_document(self.gateway, doc)

    def test_open_count_drop_leaks_nothing(self):
        code, doc = open_document(self.gateway, self.sample_pdf)
        self.assertEqual(self.gateway.live_resources(), {"document": 1})
        count_pages(self.gateway, doc)
        drop_document(self.gateway, doc)
        self.assertEqual(self.gateway.live_resources(), {})

    def test_non_pdf_document(self):
        code, doc = open_document(self.gateway, make_png(os.path.join(self.tmp.name, "a.png")))
        self.assertEqual(code, OK)
        self.assertFalse(doc.is_pdf)
        self.assertEqual(count_pages(self.gateway, doc), (OK, 1))
        drop_document(self.gateway, doc)

    def test_dropped_document_is_missing(self):
        _, doc = open_document(self.gateway, self.sample_pdf)
        drop_document(self.gateway, doc)
        drop_document(self.gateway, doc)
        self.assertEqual(count_pages(self.gateway, doc), (ARGUMENT_ERROR, None))

    def test_drop_none(self):
        drop_document(self.gateway, None)
        drop_document(None, None)

    def test_foreign_gateway(self):
        other = new_context()
        _, doc = open_document(self.gateway, self.sample_pdf)
        self.assertEqual(count_pages(other, doc), (ARGUMENT_ERROR, None))
        with self.assertRaises(ValueError):
            drop_document(other, doc)
        drop_document(self.gateway, doc)
        drop_context(other)


if __name__ == "__main__":
    unittest.main()
