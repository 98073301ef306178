"""File-based mail transport (JSON lines outbox)."""

import fcntl
import json
from datetime import datetime, timezone
from pathlib import Path

from ..errors import TransportError
from .base import MailMessage, MailTransport


class FileMailTransport(MailTransport):
    """Append each message as one JSON line to an outbox file."""

    def __init__(self, name: str, output_path: str, create_dirs: bool = True):
        super().__init__(name, {"output_path": output_path})
        self.output_path = Path(output_path)

        if create_dirs:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)

    def send(self, message: MailMessage) -> None:
        """Write the message to the outbox."""
        entry = message.to_dict()
        entry["queued_at"] = datetime.now(timezone.utc).isoformat()

        try:
            with open(self.output_path, "a", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                try:
                    f.write(json.dumps(entry, ensure_ascii=False))
                    f.write("\n")
                    f.flush()
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)

        except OSError as e:
            # File system errors are retryable
            self._error_count += 1
            self.logger.warning(
                "Outbox write failed",
                transport=self.name,
                output_path=str(self.output_path),
                error=str(e)
            )
            raise TransportError(
                f"Outbox write failed: {e}",
                retryable=True,
                recipient=message.to
            ) from e

        self._sent_count += 1
        self.logger.info(
            "Mail written to outbox",
            transport=self.name,
            output_path=str(self.output_path)
        )

    def read_outbox(self) -> list[dict]:
        """Read every message written so far."""
        if not self.output_path.exists():
            return []

        with open(self.output_path, encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]

    def health_check(self) -> bool:
        """Check if the outbox directory is writable."""
        try:
            return self.output_path.parent.exists() and self.output_path.parent.is_dir()
        except Exception:
            return False
