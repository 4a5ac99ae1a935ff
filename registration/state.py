from enum import Enum
from pathlib import Path
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class RegistrationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class FieldStatus(str, Enum):
    UNTOUCHED = "untouched"
    LOCAL_ERROR = "local_error"
    REMOTE_ERROR = "remote_error"
    VALID = "valid"


class UploadedFile(BaseModel):
    name: str = Field(..., description="Original file name")
    size: int = Field(..., ge=0, description="Payload size in bytes")
    content_type: str = "application/octet-stream"
    content: bytes = Field(default=b"", repr=False)

    @classmethod
    def from_bytes(cls, name: str, content: bytes, content_type: str = "application/octet-stream") -> "UploadedFile":
        return cls(name=name, size=len(content), content_type=content_type, content=content)

    @classmethod
    def from_path(cls, path: Union[str, Path], content_type: str = "application/octet-stream") -> "UploadedFile":
        p = Path(path)
        return cls.from_bytes(p.name, p.read_bytes(), content_type)


class SubmissionReceipt(BaseModel):
    college_id: str
    status: str
    submitted_at: str


class RegistrationState(BaseModel):
    """
    Everything the registration form knows about one draft. The same model
    is the LangGraph state, so a checkpoint of it is a resumable draft.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, use_enum_values=True)

    values: Dict[str, str] = Field(default_factory=dict, description="Field name -> raw value")
    files: Dict[str, List[UploadedFile]] = Field(default_factory=dict, description="Attachment slot -> files")
    current_section: int = 0

    field_status: Dict[str, FieldStatus] = Field(default_factory=dict)
    local_errors: Dict[str, str] = Field(default_factory=dict)
    remote_errors: Dict[str, str] = Field(default_factory=dict)
    missing_fields: List[str] = Field(default_factory=list)
    focus_field: Optional[str] = None
    notice: Optional[str] = Field(default=None, description="Non field-scoped failure message")
    receipt: Optional[SubmissionReceipt] = None

    # graph inputs, consumed and reset by the draft graph
    edits: Dict[str, str] = Field(default_factory=dict)
    uploads: Dict[str, List[UploadedFile]] = Field(default_factory=dict)
    action: Optional[Literal["next", "previous", "submit"]] = None


class SubmissionSuccess(BaseModel):
    kind: Literal["success"] = "success"
    college_id: str
    status: str
    submitted_at: str


class SubmissionFieldErrors(BaseModel):
    kind: Literal["field_errors"] = "field_errors"
    errors: Dict[str, str]
    source: Literal["local", "remote"] = "remote"


class SubmissionFailure(BaseModel):
    kind: Literal["failure"] = "failure"
    message: str


Outcome = Annotated[
    Union[SubmissionSuccess, SubmissionFieldErrors, SubmissionFailure],
    Field(discriminator="kind"),
]
