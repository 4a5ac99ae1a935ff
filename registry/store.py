import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

import structlog
from pydantic import BaseModel, Field

from registration.state import RegistrationStatus

logger = structlog.get_logger(__name__)

ID_PREFIX = "COL"
ID_WIDTH = 3


class RecordNotFound(LookupError):
    def __init__(self, college_id: str):
        super().__init__(college_id)
        self.college_id = college_id


def utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class StoredFile(BaseModel):
    name: str
    size: int
    content_type: str = "application/octet-stream"
    content: bytes = Field(default=b"", repr=False)


class RegistrationRecord(BaseModel):
    id: str
    form_data: Dict[str, str] = Field(default_factory=dict)
    status: str = RegistrationStatus.PENDING.value
    submittedAt: str
    createdAt: str
    updatedAt: Optional[str] = None
    attachments: Dict[str, List[StoredFile]] = Field(default_factory=dict)

    def to_public(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"id": self.id, **self.form_data}
        body["status"] = self.status
        body["submittedAt"] = self.submittedAt
        body["createdAt"] = self.createdAt
        if self.updatedAt is not None:
            body["updatedAt"] = self.updatedAt
        if self.attachments:
            body["attachments"] = {
                slot: [{"name": f.name, "size": f.size} for f in files]
                for slot, files in self.attachments.items()
            }
        return body


class CollegeRegistry:
    """In-memory registration store. Ids come from a per-instance counter."""

    def __init__(self):
        self._lock = threading.Lock()
        self._records: List[RegistrationRecord] = []
        self._counter = 1

    def _next_id(self) -> str:
        college_id = f"{ID_PREFIX}{self._counter:0{ID_WIDTH}d}"
        self._counter += 1
        return college_id

    def create(
        self,
        fields: Mapping[str, str],
        attachments: Optional[Mapping[str, List[StoredFile]]] = None,
    ) -> RegistrationRecord:
        now = utc_timestamp()
        with self._lock:
            record = RegistrationRecord(
                id=self._next_id(),
                form_data={k: v for k, v in fields.items() if k not in ("id", "status")},
                submittedAt=now,
                createdAt=now,
                attachments=dict(attachments or {}),
            )
            self._records.append(record)
        logger.info("record_created", college_id=record.id)
        return record

    def get(self, college_id: str) -> RegistrationRecord:
        with self._lock:
            for record in self._records:
                if record.id == college_id:
                    return record
        raise RecordNotFound(college_id)

    def list_all(self) -> List[RegistrationRecord]:
        with self._lock:
            return list(self._records)

    def update_status(self, college_id: str, status: str) -> RegistrationRecord:
        record = self.get(college_id)
        with self._lock:
            record.status = status
            record.updatedAt = utc_timestamp()
        logger.info("record_status_updated", college_id=college_id, status=status)
        return record
