"""Tests for message construction and the Gmail / mock transports."""

import base64
import email
import json
import sys
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest import mock

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import httplib2
from googleapiclient.errors import HttpError

from src.auth.manager import AuthorizedContext
from src.auth.models import ClientCredential, Token
from src.mail_provider import GmailMockTransport, SendPayload, TransportError, build_message, encode_raw
from src.mail_provider.gmail_real import GmailTransport

PAYLOAD = SendPayload(
    sender="Alice <alice@example.com>",
    to="bob@example.org",
    subject="Quarterly numbers",
    body="Hi Bob,\n\nSee attached.\n",
)


def _context() -> AuthorizedContext:
    credential = ClientCredential(client_id="id", client_secret="secret")
    token = Token(access_token="ya29.x", expiry=datetime.now(timezone.utc) + timedelta(hours=1))
    return AuthorizedContext(credentials=token.to_google(credential), source="cache")


class TestMessage(unittest.TestCase):
    def test_headers(self):
        message = build_message(PAYLOAD)
        self.assertEqual(message["From"], "Alice <alice@example.com>")
        self.assertEqual(message["To"], "bob@example.org")
        self.assertEqual(message["Subject"], "Quarterly numbers")
        self.assertIsNotNone(message["Date"])
        self.assertTrue(message["Message-ID"].endswith("@example.com>"))

    def test_message_ids_are_unique(self):
        ids = {build_message(PAYLOAD)["Message-ID"] for _ in range(20)}
        self.assertEqual(len(ids), 20)

    def test_raw_is_urlsafe_base64_of_message(self):
        raw = encode_raw(build_message(PAYLOAD))
        self.assertNotIn("+", raw)
        self.assertNotIn("/", raw)
        parsed = email.message_from_bytes(base64.urlsafe_b64decode(raw))
        self.assertEqual(parsed["Subject"], "Quarterly numbers")
        self.assertIn("See attached.", parsed.get_payload(decode=True).decode("utf-8"))

    def test_non_ascii_subject(self):
        payload = PAYLOAD.model_copy(update={"subject": "Überweisung ✓", "body": "Grüße"})
        parsed = email.message_from_bytes(base64.urlsafe_b64decode(encode_raw(build_message(payload))))
        self.assertIn("utf-8", parsed["Subject"].lower())
        self.assertEqual(parsed.get_payload(decode=True).decode("utf-8").strip(), "Grüße")


class TestGmailTransport(unittest.TestCase):
    def _service(self):
        service = mock.MagicMock()
        send = service.users.return_value.messages.return_value.send
        return service, send

    def test_send(self):
        service, send = self._service()
        send.return_value.execute.return_value = {
            "id": "18c2f",
            "threadId": "18c2f",
            "labelIds": ["SENT"],
        }
        transport = GmailTransport(_context(), service_factory=lambda _ctx: service)

        result = transport.send(PAYLOAD)

        self.assertEqual(result.id, "18c2f")
        self.assertEqual(result.thread_id, "18c2f")
        self.assertEqual(result.label_ids, ["SENT"])
        self.assertEqual(result.status_code, 200)
        send.assert_called_once()
        kwargs = send.call_args.kwargs
        self.assertEqual(kwargs["userId"], "me")
        decoded = base64.urlsafe_b64decode(kwargs["body"]["raw"]).decode("utf-8")
        self.assertIn("To: bob@example.org", decoded)

    def test_http_error_is_transport_error(self):
        service, send = self._service()
        resp = mock.Mock(status=403, reason="Forbidden")
        send.return_value.execute.side_effect = HttpError(
            resp, b'{"error": {"code": 403, "message": "Insufficient Permission"}}'
        )
        transport = GmailTransport(_context(), service_factory=lambda _ctx: service)

        with self.assertRaises(TransportError) as ctx:
            transport.send(PAYLOAD)
        self.assertEqual(ctx.exception.status_code, 403)
        self.assertEqual(send.return_value.execute.call_count, 1)

    def test_network_error_is_transport_error(self):
        service, send = self._service()
        send.return_value.execute.side_effect = ConnectionResetError("reset by peer")
        transport = GmailTransport(_context(), service_factory=lambda _ctx: service)
        with self.assertRaises(TransportError) as ctx:
            transport.send(PAYLOAD)
        self.assertIsNone(ctx.exception.status_code)

    def test_unresolvable_host_is_transport_error(self):
        """httplib2 connection failures are not OSErrors; they still surface as TransportError."""
        service, send = self._service()
        send.return_value.execute.side_effect = httplib2.ServerNotFoundError(
            "Unable to find the server at gmail.googleapis.com"
        )
        transport = GmailTransport(_context(), service_factory=lambda _ctx: service)
        with self.assertRaises(TransportError) as ctx:
            transport.send(PAYLOAD)
        self.assertIsNone(ctx.exception.status_code)
        self.assertIn("gmail.googleapis.com", str(ctx.exception))

    def test_service_built_once(self):
        service, send = self._service()
        send.return_value.execute.return_value = {"id": "1"}
        factory = mock.Mock(return_value=service)
        transport = GmailTransport(_context(), service_factory=factory)
        transport.send(PAYLOAD)
        transport.send(PAYLOAD)
        factory.assert_called_once()


class TestGmailMockTransport(unittest.TestCase):
    def test_appends_to_outbox(self):
        with tempfile.TemporaryDirectory() as tmp:
            outbox = Path(tmp) / "out" / "outbox.json"
            transport = GmailMockTransport(outbox)
            first = transport.send(PAYLOAD)
            second = transport.send(PAYLOAD)

            items = json.loads(outbox.read_text(encoding="utf-8"))
            self.assertEqual([i["id"] for i in items], [first.id, second.id])
            self.assertNotEqual(items[0]["messageId"], items[1]["messageId"])
            decoded = base64.urlsafe_b64decode(items[0]["raw"]).decode("utf-8")
            self.assertIn("Subject: Quarterly numbers", decoded)


if __name__ == "__main__":
    unittest.main()
