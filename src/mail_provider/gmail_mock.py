"""Mock transport: appends messages to a local JSON outbox instead of calling Gmail."""

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from src.mail_provider.message import build_message, encode_raw
from src.mail_provider.models import SendPayload, SendResult
from src.utils.logger import get_logger

logger = get_logger("gmail_mailer.mail_provider")


class GmailMockTransport:
    """Dry-run transport; each sent message becomes one entry in `outbox_path`."""

    def __init__(self, outbox_path: Path):
        self._outbox_path = Path(outbox_path)
        logger.info("mail_provider.init", outbox_path=str(self._outbox_path))

    def _load_outbox(self) -> list[dict[str, Any]]:
        if not self._outbox_path.exists():
            logger.debug("mail_provider.outbox_missing", outbox_path=str(self._outbox_path))
            return []
        with self._outbox_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        items = data if isinstance(data, list) else data.get("messages", [])
        logger.debug("mail_provider.outbox_loaded", count=len(items or []))
        return items or []

    def _save_outbox(self, items: list[dict[str, Any]]) -> None:
        self._outbox_path.parent.mkdir(parents=True, exist_ok=True)
        with self._outbox_path.open("w", encoding="utf-8") as f:
            json.dump(items, f, indent=2, default=str)
        logger.info("mail_provider.outbox_written", count=len(items), outbox_path=str(self._outbox_path))

    def send(self, payload: SendPayload) -> SendResult:
        message = build_message(payload)
        gmail_id = uuid.uuid4().hex[:16]
        items = self._load_outbox()
        items.append(
            {
                "id": gmail_id,
                "threadId": gmail_id,
                "labelIds": ["SENT"],
                "messageId": message["Message-ID"],
                "sentAt": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
                "raw": encode_raw(message),
            }
        )
        self._save_outbox(items)
        return SendResult(id=gmail_id, thread_id=gmail_id, label_ids=["SENT"], status_code=200)
