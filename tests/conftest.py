import httpx
import pytest
from fastapi.testclient import TestClient

from registration.client import RegistryClient
from registration.fields import CHEQUE_SLOT
from registration.form import FormStateManager
from registration.state import UploadedFile
from registration.submission import SubmissionCoordinator
from registration.validator import RegistrationValidator
from registry.app import create_app
from registry.store import CollegeRegistry

SECTION_0 = {
    "collegeName": "Green Valley Institute of Technology",
    "establishedYear": "1995",
    "address": "12 Lake Road, Kottayam, Kerala 686001",
    "email": "admissions@gvit.edu.in",
    "phone": "+91 9876543210",
    "representativeName": "Anita Menon",
    "representativePhone": "9876500001",
    "representativeEmail": "rep@gvit.edu.in",
}

SECTION_1 = {
    "coordinatorName": "Rahul Nair",
    "coordinatorDesignation": "Dean of Students",
    "coordinatorPhone": "9876500002",
    "coordinatorEmail": "dean@gvit.edu.in",
    "feeConcession": "50% tuition waiver for scholarship students",
    "bankName": "State Bank of India",
    "accountNumber": "12345678901",
    "confirmAccountNumber": "12345678901",
    "ifscCode": "SBIN0001234",
}

VALID_VALUES = {**SECTION_0, **SECTION_1}


@pytest.fixture
def section_0():
    return dict(SECTION_0)


@pytest.fixture
def section_1():
    return dict(SECTION_1)


@pytest.fixture
def valid_values():
    return dict(VALID_VALUES)


@pytest.fixture
def cheque():
    return UploadedFile.from_bytes("cheque.pdf", b"%PDF-1.4 cancelled cheque", "application/pdf")


@pytest.fixture
def validator():
    return RegistrationValidator()


@pytest.fixture
def registry():
    return CollegeRegistry()


@pytest.fixture
def api(registry):
    return TestClient(create_app(registry))


@pytest.fixture
def client(api):
    return RegistryClient(api, token="test-token")


@pytest.fixture
def coordinator(client, validator):
    return SubmissionCoordinator(client, validator)


@pytest.fixture
def filled_form(valid_values, cheque, validator):
    form = FormStateManager(validator=validator)
    for name, value in valid_values.items():
        form.set_field(name, value)
    form.attach_file(CHEQUE_SLOT, cheque)
    return form


class ScriptedRegistry:
    """Stands in for the registry over httpx.MockTransport and records every request."""

    def __init__(self):
        self.calls = []
        self.reply = self.accept

    @staticmethod
    def accept(request):
        return httpx.Response(201, json={
            "success": True,
            "collegeId": "COL001",
            "status": "pending",
            "submittedAt": "2026-01-01T00:00:00.000Z",
        })

    def handler(self, request):
        self.calls.append(request)
        return self.reply(request)


@pytest.fixture
def scripted():
    return ScriptedRegistry()


@pytest.fixture
def scripted_client(scripted):
    http = httpx.Client(transport=httpx.MockTransport(scripted.handler), base_url="http://registry.test")
    return RegistryClient(http, token="test-token")
