from typing import List, Optional

from registration.fields import SECTIONS, FormSection
from registration.form import FormStateManager
from registration.validator import RegistrationValidator


class SectionNavigator:
    """Linear walk over the form sections; forward moves are gated on validity."""

    def __init__(
        self,
        form: FormStateManager,
        validator: Optional[RegistrationValidator] = None,
        sections: Optional[List[FormSection]] = None,
    ):
        self.form = form
        self.validator = validator or form.validator
        self.sections = sections or SECTIONS

    @property
    def current_section(self) -> int:
        return self.form.state.current_section

    @property
    def section(self) -> FormSection:
        return self.sections[self.current_section]

    @property
    def is_terminal(self) -> bool:
        return self.current_section == len(self.sections) - 1

    @property
    def progress(self) -> float:
        return (self.current_section + 1) / len(self.sections)

    def next(self) -> bool:
        if self.is_terminal:
            return False

        values = self.form.get_all_values()
        results = self.validator.validate_fields(self.section.required_fields, values)
        failed = self.form.record_validation(results)
        self.form.state.missing_fields = self.validator.compute_missing_fields(values)

        if failed:
            self.form.state.focus_field = next(n for n in self.section.required_fields if n in failed)
            return False

        self.form.state.focus_field = None
        self.form.state.current_section = self.current_section + 1
        return True

    def previous(self) -> bool:
        self.form.clear_errors()
        if self.current_section == 0:
            return False
        self.form.state.current_section = self.current_section - 1
        return True
