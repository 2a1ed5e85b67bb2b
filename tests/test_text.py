import os
import tempfile
import unittest

from pdfgate.bridge import OK, DiagnosticBuffer
from pdfgate.document import drop_document, open_document
from pdfgate.gateway import drop_context, new_context
from pdfgate.payload import Payload, XFA
from pdfgate.text import extract_text, free_text
from samples import make_text_pdf


class TestExtractText(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.sample_pdf = make_text_pdf(
            os.path.join(self.tmp.name, "sample.pdf"), ["Hello\nWorld", "", "Grüße"]
        )
        self.gateway = new_context()
        code, self.doc = open_document(self.gateway, self.sample_pdf)
        self.assertEqual(code, OK)

    def tearDown(self):
        drop_document(self.gateway, self.doc)
        drop_context(self.gateway)
        self.tmp.cleanup()

    def test_reading_order(self):
        payload = extract_text(self.gateway, self.doc, 0)
        self.assertIsNotNone(payload)
        self.assertTrue(payload.text.startswith("Hello\nWorld\n"))
        self.assertEqual(payload.text.split(), ["Hello", "World"])
        free_text(self.gateway, payload)

    def test_payload_is_nul_terminated_utf8(self):
        payload = extract_text(self.gateway, self.doc, 2)
        self.assertTrue(payload.raw.endswith(b"\0"))
        self.assertEqual(len(payload), len(payload.raw) - 1)
        self.assertIn("Grüße", payload.data.decode("utf-8"))
        free_text(self.gateway, payload)

    def test_blank_page_gives_empty_payload(self):
        diag = DiagnosticBuffer(64)
        payload = extract_text(self.gateway, self.doc, 1, diag)
        self.assertIsNotNone(payload)
        self.assertEqual(len(payload), 0)
        self.assertEqual(payload.raw, b"\0")
        self.assertTrue(diag.is_empty())
        free_text(self.gateway, payload)

    def test_page_out_of_range(self):
        for page_number in (-1, 3):
            diag = DiagnosticBuffer(64)
            self.assertIsNone(extract_text(self.gateway, self.doc, page_number, diag))
            self.assertFalse(diag.is_empty())

    def test_missing_arguments(self):
        diag = DiagnosticBuffer(64)
        self.assertIsNone(extract_text(None, self.doc, 0, diag))
        self.assertIsNone(extract_text(self.gateway, None, 0, diag))
        self.assertTrue(diag.is_empty())

    def test_resources_released(self):
        payload = extract_text(self.gateway, self.doc, 0)
        self.assertEqual(self.gateway.live_resources(), {"document": 1, "text payload": 1})
        free_text(self.gateway, payload)
        self.assertEqual(self.gateway.live_resources(), {"document": 1})
        extract_text(self.gateway, self.doc, 7)
        self.assertEqual(self.gateway.live_resources(), {"document": 1})

    def test_free_text(self):
        free_text(self.gateway, None)
        payload = extract_text(self.gateway, self.doc, 0)
        free_text(self.gateway, payload)
        free_text(self.gateway, payload)
        self.assertTrue(payload.released)
        with self.assertRaises(ValueError):
            payload.data

    def test_free_text_rejects_xfa_payload(self):
        payload = Payload(self.gateway, b"<xdp/>", XFA)
        with self.assertRaises(ValueError):
            free_text(self.gateway, payload)

    def test_free_text_rejects_foreign_gateway(self):
        other = new_context()
        payload = extract_text(self.gateway, self.doc, 0)
        with self.assertRaises(ValueError):
            free_text(other, payload)
        free_text(self.gateway, payload)
        drop_context(other)


if __name__ == "__main__":
    unittest.main()
