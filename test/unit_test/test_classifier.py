"""
Unit tests for faucet response classification
"""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from moonveil_automation.infra.classifier import (
    ResponseClassifier,
    RATE_LIMIT_PHRASES,
    RETRYABLE_STATUS_CODES,
    UnparseableBody,
    extract_message,
    split_tx_hash,
)
from moonveil_automation.errors import ErrorCode


class TestResponseClassifier(unittest.TestCase):
    """Tests for the status/body classification table"""

    def setUp(self):
        self.classifier = ResponseClassifier()

    def test_429_is_rate_limited(self):
        outcome = self.classifier.classify(429, {"msg": "slow down"})
        self.assertTrue(outcome.is_rate_limited)

    def test_rate_limit_phrase_on_200(self):
        outcome = self.classifier.classify(200, {"msg": "You have exceeded the rate limit"})
        self.assertTrue(outcome.is_rate_limited)
        self.assertEqual(outcome.error_code, ErrorCode.FAUCET_RATE_LIMITED)

    def test_rate_limit_phrase_on_error_status(self):
        outcome = self.classifier.classify(400, {"msg": "Please wait 24 hours"})
        self.assertTrue(outcome.is_rate_limited)

    def test_phrases_are_case_sensitive(self):
        outcome = self.classifier.classify(200, {"msg": "WAIT"})
        self.assertTrue(outcome.is_success)

    def test_success_with_tx_hash(self):
        outcome = self.classifier.classify(200, {"msg": "Sent! Txhash:  0xabc123 "})
        self.assertTrue(outcome.is_success)
        self.assertEqual(outcome.tx_hash, "0xabc123")

    def test_success_without_hash(self):
        outcome = self.classifier.classify(201, {"msg": "queued"})
        self.assertTrue(outcome.is_success)
        self.assertIsNone(outcome.tx_hash)

    def test_json_text_and_bytes_bodies(self):
        text = self.classifier.classify(200, '{"msg": "Txhash: 0x1"}')
        raw = self.classifier.classify(200, b'{"msg": "Txhash: 0x2"}')
        self.assertEqual(text.tx_hash, "0x1")
        self.assertEqual(raw.tx_hash, "0x2")

    def test_retryable_statuses(self):
        for status in (408, 500, 502, 503, 504):
            outcome = self.classifier.classify(status, "Service down")
            self.assertTrue(outcome.is_retryable, status)
            self.assertEqual(outcome.error_code, ErrorCode.FAUCET_REQUEST_FAILED)

    def test_other_status_is_fatal(self):
        outcome = self.classifier.classify(400, {"msg": "invalid address"})
        self.assertTrue(outcome.is_fatal)
        self.assertEqual(outcome.error_code, ErrorCode.FAUCET_REJECTED)

    def test_html_page_on_200_is_fatal(self):
        outcome = self.classifier.classify(200, "<html><body>Cloudflare: please wait</body></html>")
        self.assertTrue(outcome.is_fatal)
        self.assertEqual(outcome.error_code, ErrorCode.FAUCET_INVALID_RESPONSE)

    def test_html_page_on_503_is_retryable(self):
        outcome = self.classifier.classify(503, "<html><body>Service Unavailable</body></html>")
        self.assertTrue(outcome.is_retryable)
        self.assertEqual(outcome.error_code, ErrorCode.FAUCET_REQUEST_FAILED)

    def test_empty_text_body_is_fatal(self):
        outcome = self.classifier.classify(200, "")
        self.assertTrue(outcome.is_fatal)

    def test_only_message_fields_are_scanned(self):
        outcome = self.classifier.classify(200, {"status": "ok", "data": {"next_claim_in_hours": 24}})
        self.assertTrue(outcome.is_success)
        self.assertIsNone(outcome.tx_hash)

    def test_object_without_message_on_error_status(self):
        outcome = self.classifier.classify(400, {"error": "wait an hour"})
        self.assertTrue(outcome.is_fatal)
        self.assertEqual(outcome.error_code, ErrorCode.FAUCET_REJECTED)

    def test_unparseable_body_is_fatal(self):
        outcome = self.classifier.classify(400, b"\xff\xfe\xfd")
        self.assertTrue(outcome.is_fatal)
        self.assertEqual(outcome.error_code, ErrorCode.FAUCET_INVALID_RESPONSE)

    def test_unparseable_body_with_retryable_status(self):
        outcome = self.classifier.classify(502, object())
        self.assertTrue(outcome.is_retryable)


class TestHelpers(unittest.TestCase):
    """Tests for message extraction helpers"""

    def test_extract_message(self):
        self.assertEqual(extract_message({"msg": "hi"}), "hi")
        self.assertEqual(extract_message({"message": "hello"}), "hello")
        self.assertEqual(extract_message('{"msg": "ok"}'), "ok")
        self.assertEqual(extract_message({"status": "ok"}), "")
        self.assertEqual(extract_message("[1, 2]"), "")
        self.assertEqual(extract_message(None), "")

    def test_extract_message_rejects_non_json_text(self):
        for body in ("plain text", "<html><body>Bad Gateway</body></html>", "", b"<html>"):
            with self.assertRaises(UnparseableBody, msg=repr(body)):
                extract_message(body)

    def test_split_tx_hash(self):
        self.assertEqual(split_tx_hash("Txhash: 0xdef"), "0xdef")
        self.assertIsNone(split_tx_hash("no marker"))

    def test_tables(self):
        self.assertEqual(RATE_LIMIT_PHRASES, ("exceeded the rate limit", "wait", "hour"))
        self.assertEqual(RETRYABLE_STATUS_CODES, {408, 429, 500, 502, 503, 504})


if __name__ == "__main__":
    unittest.main()
