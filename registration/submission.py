from typing import Optional

import structlog
from pydantic import ValidationError

from registration.client import RegistryClient
from registration.errors import RegistryError, RegistryFieldErrors
from registration.fields import CHEQUE_SLOT, FILE_SLOTS
from registration.form import FormStateManager
from registration.state import (
    Outcome,
    SubmissionFailure,
    SubmissionFieldErrors,
    SubmissionReceipt,
    SubmissionSuccess,
)
from registration.validator import RegistrationValidator

logger = structlog.get_logger(__name__)

MISSING_FILE_MESSAGES = {
    CHEQUE_SLOT: "Cancelled cheque is required for bank verification",
}
GENERIC_FAILURE = "Failed to submit registration. Please try again."


class SubmissionCoordinator:
    def __init__(self, client: RegistryClient, validator: Optional[RegistrationValidator] = None):
        self.client = client
        self.validator = validator or RegistrationValidator()

    def check_ready(self, form: FormStateManager) -> Optional[SubmissionFieldErrors]:
        """Final gate over every section plus required attachments. No I/O."""
        values = form.get_all_values()
        failed = form.record_validation(self.validator.validate_all(values))
        form.state.missing_fields = self.validator.compute_missing_fields(values)

        files = form.get_files()
        for slot, (is_required, _) in FILE_SLOTS.items():
            if is_required and not files.get(slot):
                message = MISSING_FILE_MESSAGES.get(slot, f"{slot} is required")
                form.record_validation({slot: message})
                failed[slot] = message

        if not failed:
            return None

        form.state.focus_field = next(iter(failed))
        return SubmissionFieldErrors(errors=failed, source="local")

    def submit(self, form: FormStateManager) -> Outcome:
        gate = self.check_ready(form)
        if gate is not None:
            logger.info("submission_blocked", fields=sorted(gate.errors))
            return gate

        form.state.notice = None
        try:
            body = self.client.register(form.get_all_values(), form.get_files())
        except RegistryFieldErrors as e:
            if not e.errors:
                logger.warning("submission_rejected_without_fields", status_code=e.status_code)
                form.state.notice = GENERIC_FAILURE
                return SubmissionFailure(message=GENERIC_FAILURE)
            logger.info("submission_rejected", fields=sorted(e.errors))
            form.record_remote_errors(e.errors)
            form.state.focus_field = next(iter(e.errors), None)
            return SubmissionFieldErrors(errors=dict(e.errors), source="remote")
        except RegistryError as e:
            logger.warning("submission_failed", status_code=e.status_code, error=e.message)
            form.state.notice = e.message or GENERIC_FAILURE
            return SubmissionFailure(message=form.state.notice)

        try:
            outcome = SubmissionSuccess(
                college_id=body["collegeId"],
                status=body.get("status", "pending"),
                submitted_at=body["submittedAt"],
            )
        except (KeyError, TypeError, ValidationError):
            logger.warning("submission_malformed_response", body=body)
            form.state.notice = GENERIC_FAILURE
            return SubmissionFailure(message=GENERIC_FAILURE)

        form.state.receipt = SubmissionReceipt(
            college_id=outcome.college_id,
            status=outcome.status,
            submitted_at=outcome.submitted_at,
        )
        logger.info("submission_accepted", college_id=outcome.college_id)
        return outcome
