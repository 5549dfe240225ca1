"""End-to-end send_mail flow with stubbed exchange and transport."""

import json
import sys
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.auth import AuthorizationFailed, ConfigError, Token, TokenManager, load_token
from src.auth.errors import ExchangeError
from src.mail_provider import GmailMockTransport, TransportError
from src.mailer import send_mail

CLIENT_SECRETS = {
    "installed": {
        "client_id": "1234-abc.apps.googleusercontent.com",
        "client_secret": "GOCSPX-secret",
        "redirect_uris": ["http://localhost"],
        "auth_uri": "https://accounts.google.com/o/oauth2/auth",
        "token_uri": "https://oauth2.googleapis.com/token",
    }
}


class StubAcquirer:
    def __init__(self, error=None):
        self.error = error
        self.calls = 0

    def acquire(self, credential):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return Token(
            access_token="ya29.acquired",
            refresh_token="1//r",
            expiry=datetime.now(timezone.utc) + timedelta(hours=1),
            scopes=credential.scopes,
        )


class FailingTransport:
    def send(self, payload):
        raise TransportError("Gmail send failed: 500", status_code=500)


class TestSendMail(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.credentials = self.dir / "credentials.json"
        self.credentials.write_text(json.dumps(CLIENT_SECRETS), encoding="utf-8")
        self.cache = self.dir / "token.json"
        self.outbox = self.dir / "outbox.json"

    def tearDown(self):
        self._tmp.cleanup()

    def _send(self, acquirer, transport_factory=None):
        return send_mail(
            sender="alice@example.com",
            to="bob@example.org",
            subject="hello",
            body="body text",
            credentials_path=self.credentials,
            cache_path=self.cache,
            manager=TokenManager(acquirer),
            transport_factory=transport_factory or (lambda _ctx: GmailMockTransport(self.outbox)),
        )

    def test_first_run_acquires_then_sends(self):
        acquirer = StubAcquirer()
        result = self._send(acquirer)
        self.assertEqual(acquirer.calls, 1)
        self.assertEqual(result.status_code, 200)
        self.assertEqual(load_token(self.cache).access_token, "ya29.acquired")
        self.assertEqual(len(json.loads(self.outbox.read_text(encoding="utf-8"))), 1)

    def test_second_run_uses_cache(self):
        acquirer = StubAcquirer()
        self._send(acquirer)
        self._send(acquirer)
        self.assertEqual(acquirer.calls, 1)

    def test_missing_credentials_is_config_error(self):
        self.credentials.unlink()
        acquirer = StubAcquirer()
        with self.assertRaises(ConfigError):
            self._send(acquirer)
        self.assertEqual(acquirer.calls, 0)

    def test_exchange_failure_aborts_before_send(self):
        with self.assertRaises(AuthorizationFailed):
            self._send(StubAcquirer(error=ExchangeError("invalid_grant")))
        self.assertFalse(self.outbox.exists())
        self.assertFalse(self.cache.exists())

    def test_transport_error_propagates(self):
        with self.assertRaises(TransportError) as ctx:
            self._send(StubAcquirer(), transport_factory=lambda _ctx: FailingTransport())
        self.assertEqual(ctx.exception.status_code, 500)

    def test_default_manager_uses_prompt(self):
        """Without a manager, the given prompt drives a real TokenAcquirer."""
        prompts = []

        def prompt(url):
            prompts.append(url)
            return ""

        with self.assertRaises(AuthorizationFailed):
            send_mail(
                sender="alice@example.com",
                to="bob@example.org",
                subject="s",
                body="b",
                credentials_path=self.credentials,
                cache_path=self.cache,
                prompt=prompt,
            )
        self.assertEqual(len(prompts), 1)
        self.assertIn("accounts.google.com", prompts[0])


if __name__ == "__main__":
    unittest.main()
