from typing import Dict, List, Mapping, Optional

from registration.fields import FILE_SLOTS, descriptor
from registration.state import FieldStatus, RegistrationState, UploadedFile
from registration.validator import RegistrationValidator


class FormStateManager:
    """
    Holds field values, attachments and per-field error state for one draft.

    Each field moves through a small state machine:

        untouched --validate--> valid | local_error
        any       --server----> remote_error
        any       --edit------> untouched   (both error slots cleared)

    A remote error outranks a local one until the user edits that field.
    """

    def __init__(self, state: Optional[RegistrationState] = None, validator: Optional[RegistrationValidator] = None):
        self.state = state.model_copy(deep=True) if state is not None else RegistrationState()
        self.validator = validator or RegistrationValidator()

    # values

    def set_field(self, name: str, value: str) -> None:
        descriptor(name)
        self.state.values = {**self.state.values, name: value}
        self._forget(name)

    def type_into(self, name: str, raw: str) -> str:
        """Keystroke boundary: numeric-only fields silently drop non-digits."""
        value = raw
        if descriptor(name).numeric_input:
            value = "".join(ch for ch in raw if ch.isdigit())
        self.set_field(name, value)
        return value

    def get_value(self, name: str) -> str:
        descriptor(name)
        return self.state.values.get(name, "")

    def get_all_values(self) -> Dict[str, str]:
        return dict(self.state.values)

    # errors

    def status(self, name: str) -> FieldStatus:
        return FieldStatus(self.state.field_status.get(name, FieldStatus.UNTOUCHED))

    def error_for(self, name: str) -> Optional[str]:
        return self.state.remote_errors.get(name) or self.state.local_errors.get(name)

    def errors(self) -> Dict[str, str]:
        merged = dict(self.state.local_errors)
        merged.update(self.state.remote_errors)
        return merged

    def has_errors(self) -> bool:
        return bool(self.state.local_errors or self.state.remote_errors)

    def record_validation(self, results: Mapping[str, Optional[str]]) -> Dict[str, str]:
        local = dict(self.state.local_errors)
        statuses = dict(self.state.field_status)

        for name, message in results.items():
            if message is None:
                local.pop(name, None)
            else:
                local[name] = message

            if statuses.get(name) == FieldStatus.REMOTE_ERROR:
                continue
            statuses[name] = (FieldStatus.VALID if message is None else FieldStatus.LOCAL_ERROR).value

        self.state.local_errors = local
        self.state.field_status = statuses
        return {n: m for n, m in results.items() if m is not None}

    def record_remote_errors(self, errors: Mapping[str, str]) -> None:
        remote = dict(self.state.remote_errors)
        statuses = dict(self.state.field_status)
        for name, message in errors.items():
            remote[name] = message
            statuses[name] = FieldStatus.REMOTE_ERROR.value
        self.state.remote_errors = remote
        self.state.field_status = statuses

    def clear_errors(self) -> None:
        statuses = {
            name: status for name, status in self.state.field_status.items()
            if status not in (FieldStatus.LOCAL_ERROR, FieldStatus.REMOTE_ERROR)
        }
        self.state.local_errors = {}
        self.state.remote_errors = {}
        self.state.field_status = statuses
        self.state.focus_field = None
        self.state.notice = None

    def _forget(self, name: str) -> None:
        self.state.local_errors = {k: v for k, v in self.state.local_errors.items() if k != name}
        self.state.remote_errors = {k: v for k, v in self.state.remote_errors.items() if k != name}
        self.state.field_status = {k: v for k, v in self.state.field_status.items() if k != name}
        if self.state.focus_field == name:
            self.state.focus_field = None

    # files

    def attach_file(self, slot: str, file: UploadedFile) -> Optional[str]:
        if slot not in FILE_SLOTS:
            raise KeyError(f"Unknown attachment slot: {slot}")

        self._forget(slot)
        error = self.validator.validate_file(file)
        if error is not None:
            self.record_validation({slot: error})
            return error

        _, many = FILE_SLOTS[slot]
        current: List[UploadedFile] = list(self.state.files.get(slot, [])) if many else []
        current.append(file)
        self.state.files = {**self.state.files, slot: current}
        return None

    def detach_file(self, slot: str) -> None:
        self.state.files = {k: v for k, v in self.state.files.items() if k != slot}
        self._forget(slot)

    def get_files(self, slot: Optional[str] = None) -> Dict[str, List[UploadedFile]]:
        if slot is None:
            return {k: list(v) for k, v in self.state.files.items()}
        return {slot: list(self.state.files.get(slot, []))}
