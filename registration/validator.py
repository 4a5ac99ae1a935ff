import re
from typing import Dict, Iterable, List, Mapping, Optional

from pydantic import EmailStr, TypeAdapter, ValidationError

from config.settings import MAX_UPLOAD_BYTES
from registration.fields import FIELDS, REQUIRED_FIELDS, Rule, RuleKind, descriptor
from registration.state import UploadedFile

_email_adapter = TypeAdapter(EmailStr)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


class RegistrationValidator:
    def __init__(self, max_file_bytes: int = MAX_UPLOAD_BYTES):
        self.max_file_bytes = max_file_bytes

    def check_rule(self, rule: Rule, value: str, values: Mapping[str, str]) -> Optional[str]:
        if rule.kind == RuleKind.REQUIRED:
            return rule.message if _is_blank(value) else None

        if rule.kind == RuleKind.MIN_LENGTH:
            return rule.message if len(value.strip()) < rule.min_length else None

        if rule.kind == RuleKind.PATTERN:
            return None if re.fullmatch(rule.pattern, value.strip()) else rule.message

        if rule.kind == RuleKind.EMAIL:
            try:
                _email_adapter.validate_python(value.strip())
            except ValidationError:
                return rule.message
            return None

        if rule.kind == RuleKind.MATCHES:
            return None if value == values.get(rule.other, "") else rule.message

        raise ValueError(f"Unsupported rule kind: {rule.kind}")

    def validate_field(self, name: str, values: Mapping[str, str]) -> Optional[str]:
        field = descriptor(name)
        value = values.get(name) or ""

        if not field.required and _is_blank(value):
            return None

        for rule in field.rules:
            error = self.check_rule(rule, value, values)
            if error is not None:
                return error
        return None

    def validate_fields(self, names: Iterable[str], values: Mapping[str, str]) -> Dict[str, Optional[str]]:
        return {name: self.validate_field(name, values) for name in names}

    def validate_all(self, values: Mapping[str, str]) -> Dict[str, Optional[str]]:
        names = [
            n for n, d in FIELDS.items()
            if d.required or not _is_blank(values.get(n))
        ]
        return self.validate_fields(names, values)

    def validate_file(self, file: UploadedFile) -> Optional[str]:
        if file.size > self.max_file_bytes:
            limit_mb = self.max_file_bytes / (1024 * 1024)
            return f"{file.name} exceeds the {limit_mb:g} MB size limit"
        return None

    @staticmethod
    def compute_missing_fields(values: Mapping[str, str]) -> List[str]:
        return sorted(n for n in REQUIRED_FIELDS if _is_blank(values.get(n)))

    @staticmethod
    def failures(results: Mapping[str, Optional[str]]) -> Dict[str, str]:
        return {name: msg for name, msg in results.items() if msg is not None}
