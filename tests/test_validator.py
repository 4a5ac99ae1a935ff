import pytest

from registration.fields import FIELDS, REQUIRED_FIELDS, SECTIONS
from registration.state import UploadedFile
from registration.validator import RegistrationValidator


def test_registry_required_fields_are_the_form_required_fields():
    assert len(REQUIRED_FIELDS) == 17
    assert [s.title for s in SECTIONS] == ["College Information", "Academic & Financial Details"]
    assert set(SECTIONS[0].required_fields) | set(SECTIONS[1].required_fields) == set(REQUIRED_FIELDS)


@pytest.mark.parametrize("name", REQUIRED_FIELDS)
@pytest.mark.parametrize("blank", ["", "   "])
def test_blank_required_field_is_an_error(validator, valid_values, name, blank):
    valid_values[name] = blank
    assert validator.validate_fields([name], valid_values)[name] is not None


@pytest.mark.parametrize("name", REQUIRED_FIELDS)
def test_valid_required_field_has_no_error(validator, valid_values, name):
    assert validator.validate_fields([name], valid_values) == {name: None}


def test_account_numbers_must_match(validator, valid_values):
    valid_values["accountNumber"] = "12345678"
    valid_values["confirmAccountNumber"] = "87654321"
    results = validator.validate_fields(["accountNumber", "confirmAccountNumber"], valid_values)
    assert results == {"accountNumber": None, "confirmAccountNumber": "Account numbers don't match"}

    valid_values["confirmAccountNumber"] = "12345678"
    assert validator.validate_fields(["confirmAccountNumber"], valid_values) == {"confirmAccountNumber": None}


def test_first_failing_rule_wins(validator, valid_values):
    valid_values["accountNumber"] = "12ab"
    assert validator.validate_field("accountNumber", valid_values) == "The Account Number field must contain only numbers."

    valid_values["accountNumber"] = "1234"
    assert validator.validate_field("accountNumber", valid_values) == "Account number must be at least 8 digits"

    valid_values["ifscCode"] = "SBIN000123"
    assert validator.validate_field("ifscCode", valid_values) == "IFSC code must be 11 characters"

    valid_values["ifscCode"] = "sbin0001234"
    assert validator.validate_field("ifscCode", valid_values) == "Invalid IFSC Code format."


@pytest.mark.parametrize("value", ["not-an-email", "a@", "@gvit.edu.in"])
def test_email_format(validator, valid_values, value):
    valid_values["coordinatorEmail"] = value
    assert validator.validate_field("coordinatorEmail", valid_values) == "Coordinator email is required"


@pytest.mark.parametrize("value", ["12345", "phone", "+91 98765 4321x"])
def test_phone_format(validator, valid_values, value):
    valid_values["phone"] = value
    assert validator.validate_field("phone", valid_values) == "Enter a valid phone number"


def test_untouched_optional_fields_have_no_error(validator, valid_values):
    results = validator.validate_fields(["departments", "passPercentage", "collegeWebsite"], valid_values)
    assert results == {"departments": None, "passPercentage": None, "collegeWebsite": None}


def test_filled_optional_fields_are_checked(validator, valid_values):
    valid_values["departments"] = "fifteen"
    valid_values["passPercentage"] = "95%"
    results = validator.validate_fields(["departments", "passPercentage"], valid_values)
    assert results == {
        "departments": "The Number of Departments field must contain only numbers.",
        "passPercentage": None,
    }


def test_validate_all_covers_every_section_and_filled_optionals(validator, valid_values):
    valid_values["totalStudents"] = "many"
    del valid_values["ifscCode"]
    failures = validator.failures(validator.validate_all(valid_values))
    assert set(failures) == {"totalStudents", "ifscCode"}


def test_compute_missing_fields(validator, section_0):
    missing = validator.compute_missing_fields(section_0)
    assert missing == sorted(SECTIONS[1].required_fields)


def test_file_size_ceiling():
    validator = RegistrationValidator(max_file_bytes=2 * 1024 * 1024)
    at_limit = UploadedFile(name="cheque.jpg", size=2 * 1024 * 1024)
    too_big = UploadedFile(name="cheque.jpg", size=2 * 1024 * 1024 + 1)

    assert validator.validate_file(at_limit) is None
    assert validator.validate_file(too_big) == "cheque.jpg exceeds the 2 MB size limit"


def test_unknown_field_raises(validator):
    with pytest.raises(KeyError):
        validator.validate_field("password", {})


def test_numeric_input_fields():
    numeric = {n for n, d in FIELDS.items() if d.numeric_input}
    assert numeric == {
        "establishedYear", "accountNumber", "confirmAccountNumber",
        "departments", "totalStudents", "batchesPassedOut",
    }
