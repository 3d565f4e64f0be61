"""Persisted history of answered questions.

The log file is a single pretty-printed JSON array, newest entry last.
Appends are read-modify-write of the whole file, so concurrent writers
can lose each other's entries.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from faqrag.errors import LogIOError
from faqrag.models import EvaluationResult, LoggedQueryOutput, QueryResponse

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class QueryLog:
    """Append-only JSON array of LoggedQueryOutput records."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def read(self) -> list[dict[str, Any]]:
        """Return the stored records; a missing file is an empty log.

        Raises:
            LogIOError: If the file is unreadable or not a JSON array.
        """
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                entries = json.load(f)
        except (OSError, ValueError) as e:
            raise LogIOError(f"Cannot read query log {self.path}: {e}") from e
        if not isinstance(entries, list):
            raise LogIOError(f"Query log {self.path} does not contain a JSON array")
        return entries

    def append(
        self,
        response: QueryResponse,
        evaluation: Optional[EvaluationResult] = None,
    ) -> Optional[LoggedQueryOutput]:
        """Timestamp the response and append it to the log.

        Failures are logged as warnings and never raised.

        Returns:
            The stored record, or None if it could not be written.
        """
        try:
            entries = self.read()
            record = LoggedQueryOutput(
                user_question=response.user_question,
                system_answer=response.system_answer,
                chunks_related=response.chunks_related,
                timestamp=utc_timestamp(),
                evaluation=evaluation,
            )
            entries.append(record.model_dump(by_alias=True, exclude_none=True))

            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(entries, f, indent=2, ensure_ascii=False)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to log query output: {e}")
            return None
        return record
