from typing import Any, Dict, Optional

from registration.client import RegistryClient
from registration.errors import CollegeNotFound, RegistryError
from registration.state import RegistrationStatus

STATUS_LABELS = {
    RegistrationStatus.PENDING.value: "Pending Review",
    RegistrationStatus.APPROVED.value: "Approved",
    RegistrationStatus.REJECTED.value: "Not Approved",
}


class CollegeProfileView:
    """College dashboard data: one record lookup with a page-level error state."""

    def __init__(self, client: RegistryClient):
        self.client = client
        self.college_id: Optional[str] = None
        self.record: Optional[Dict[str, Any]] = None
        self.error: Optional[str] = None

    def load(self, college_id: str) -> bool:
        self.college_id = college_id
        self.record = None
        self.error = None
        try:
            self.record = self.client.get_college(college_id)
        except CollegeNotFound:
            self.error = "College not found"
        except RegistryError as e:
            self.error = e.message or "Failed to fetch college profile."
        return self.record is not None

    def retry(self) -> bool:
        if self.college_id is None:
            raise RuntimeError("Nothing to retry: no college has been loaded yet")
        return self.load(self.college_id)

    @property
    def status(self) -> Optional[str]:
        return self.record.get("status") if self.record else None

    @property
    def status_label(self) -> Optional[str]:
        if self.status is None:
            return None
        return STATUS_LABELS.get(self.status, self.status.capitalize())

    @property
    def is_approved(self) -> bool:
        return self.status == RegistrationStatus.APPROVED.value
