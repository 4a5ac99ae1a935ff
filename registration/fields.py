"""
Field descriptor table for the college registration form.

Every field the form knows about is declared here exactly once, together
with its section, whether it is required, and its ordered validation rules.
Nothing else in the package hard-codes field names except through this table.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field


class RuleKind(str, Enum):
    REQUIRED = "required"
    MIN_LENGTH = "min_length"
    PATTERN = "pattern"
    EMAIL = "email"
    MATCHES = "matches"


class Rule(BaseModel):
    kind: RuleKind
    message: str
    pattern: Optional[str] = None
    min_length: Optional[int] = None
    other: Optional[str] = Field(default=None, description="Field this one must equal")


def required(message: str) -> Rule:
    return Rule(kind=RuleKind.REQUIRED, message=message)


def min_length(n: int, message: str) -> Rule:
    return Rule(kind=RuleKind.MIN_LENGTH, min_length=n, message=message)


def pattern(regex: str, message: str) -> Rule:
    return Rule(kind=RuleKind.PATTERN, pattern=regex, message=message)


def email(message: str) -> Rule:
    return Rule(kind=RuleKind.EMAIL, message=message)


def matches(other: str, message: str) -> Rule:
    return Rule(kind=RuleKind.MATCHES, other=other, message=message)


class FieldDescriptor(BaseModel):
    name: str
    label: str
    section: int
    required: bool = False
    rules: List[Rule] = Field(default_factory=list)
    numeric_input: bool = False


class FormSection(BaseModel):
    index: int
    title: str
    icon: str = Field(default="", description="Presentation only")
    fields: Tuple[str, ...] = ()

    @property
    def required_fields(self) -> Tuple[str, ...]:
        return tuple(n for n in self.fields if FIELDS[n].required)


PHONE_PATTERN = r"^\+?\d[\d\s-]{8,13}\d$"
DIGITS_PATTERN = r"^\d+$"
YEAR_PATTERN = r"^\d{4}$"
PERCENT_PATTERN = r"^\d+(\.\d+)?%?$"
IFSC_PATTERN = r"^[A-Z]{4}0[A-Z0-9]{6}$"
URL_PATTERN = r"^(https?://)?[\w.-]+\.[a-z]{2,}(/\S*)?$"

CHEQUE_SLOT = "cancelledCheque"
INFRASTRUCTURE_SLOT = "infrastructureFiles"

# slot -> (required, allows many)
FILE_SLOTS: Dict[str, Tuple[bool, bool]] = {
    CHEQUE_SLOT: (True, False),
    INFRASTRUCTURE_SLOT: (False, True),
}


def _text(name: str, label: str, section: int, n: int, message: str) -> FieldDescriptor:
    return FieldDescriptor(
        name=name,
        label=label,
        section=section,
        required=True,
        rules=[required(message), min_length(n, message)],
    )


def _phone(name: str, label: str, section: int) -> FieldDescriptor:
    return FieldDescriptor(
        name=name,
        label=label,
        section=section,
        required=True,
        rules=[
            required(f"{label} is required"),
            pattern(PHONE_PATTERN, f"Enter a valid {label.lower()}"),
        ],
    )


def _email(name: str, label: str, section: int, message: str) -> FieldDescriptor:
    return FieldDescriptor(
        name=name,
        label=label,
        section=section,
        required=True,
        rules=[required(message), email(message)],
    )


def _optional_number(name: str, label: str, regex: str = DIGITS_PATTERN, numeric_input: bool = True) -> FieldDescriptor:
    return FieldDescriptor(
        name=name,
        label=label,
        section=0,
        rules=[pattern(regex, f"The {label} field must contain only numbers.")],
        numeric_input=numeric_input,
    )


_DESCRIPTORS: List[FieldDescriptor] = [
    # Section 0: College Information
    _text("collegeName", "College Name", 0, 2, "College name is required"),
    FieldDescriptor(
        name="establishedYear",
        label="Established Year",
        section=0,
        required=True,
        rules=[
            required("Established year is required"),
            pattern(DIGITS_PATTERN, "The Established Year field must contain only numbers."),
            pattern(YEAR_PATTERN, "Established year must be 4 digits"),
        ],
        numeric_input=True,
    ),
    _text("address", "Address", 0, 10, "Complete address is required"),
    _email("email", "Email", 0, "Valid email is required"),
    _phone("phone", "Phone Number", 0),
    _text("representativeName", "Management Representative Name", 0, 2, "Management representative name is required"),
    _phone("representativePhone", "Representative Phone", 0),
    _email("representativeEmail", "Representative Email", 0, "Representative email is required"),
    FieldDescriptor(
        name="collegeWebsite",
        label="College Website",
        section=0,
        rules=[pattern(URL_PATTERN, "Enter a valid website address")],
    ),
    _optional_number("departments", "Number of Departments"),
    _optional_number("totalStudents", "Total Number of Students"),
    _optional_number("batchesPassedOut", "Number of Batches Passed Out"),
    _optional_number("passPercentage", "Pass %", PERCENT_PATTERN, numeric_input=False),
    # Section 1: Academic & Financial Details
    _text("coordinatorName", "Coordinator Name", 1, 2, "Coordinator name is required"),
    _text("coordinatorDesignation", "Coordinator Designation", 1, 2, "Coordinator designation is required"),
    _phone("coordinatorPhone", "Coordinator Phone", 1),
    _email("coordinatorEmail", "Coordinator Email", 1, "Coordinator email is required"),
    _text("feeConcession", "Fee Concession", 1, 10, "Fee concession details are required"),
    FieldDescriptor(name="infrastructureDetails", label="Infrastructure Facilities", section=1),
    _text("bankName", "Bank Name", 1, 2, "Bank name is required"),
    FieldDescriptor(
        name="accountNumber",
        label="Account Number",
        section=1,
        required=True,
        rules=[
            required("Account number is required"),
            pattern(DIGITS_PATTERN, "The Account Number field must contain only numbers."),
            min_length(8, "Account number must be at least 8 digits"),
        ],
        numeric_input=True,
    ),
    FieldDescriptor(
        name="confirmAccountNumber",
        label="Confirm Account Number",
        section=1,
        required=True,
        rules=[
            required("Please confirm account number"),
            matches("accountNumber", "Account numbers don't match"),
        ],
        numeric_input=True,
    ),
    FieldDescriptor(
        name="ifscCode",
        label="IFSC Code",
        section=1,
        required=True,
        rules=[
            required("IFSC code is required"),
            pattern(r"^.{11}$", "IFSC code must be 11 characters"),
            pattern(IFSC_PATTERN, "Invalid IFSC Code format."),
        ],
    ),
]

FIELDS: Dict[str, FieldDescriptor] = {d.name: d for d in _DESCRIPTORS}

SECTIONS: List[FormSection] = [
    FormSection(
        index=0,
        title="College Information",
        icon="building",
        fields=tuple(d.name for d in _DESCRIPTORS if d.section == 0),
    ),
    FormSection(
        index=1,
        title="Academic & Financial Details",
        icon="credit-card",
        fields=tuple(d.name for d in _DESCRIPTORS if d.section == 1),
    ),
]

REQUIRED_FIELDS: Tuple[str, ...] = tuple(d.name for d in _DESCRIPTORS if d.required)


def descriptor(name: str) -> FieldDescriptor:
    try:
        return FIELDS[name]
    except KeyError:
        raise KeyError(f"Unknown registration field: {name}") from None
