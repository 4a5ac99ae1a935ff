from typing import Any, Literal, Optional

from langgraph.graph import StateGraph, START, END

from registration.form import FormStateManager
from registration.navigator import SectionNavigator
from registration.state import RegistrationState
from registration.submission import SubmissionCoordinator
from registration.validator import RegistrationValidator


class RegistrationGraphFactory:
    """
    Drives a registration draft one user action per invoke.

    Input patch: ``{"edits": {...}, "uploads": {...}, "action": "next"}``.
    With a checkpointer, the ``thread_id`` is the draft id and re-invoking
    with it resumes the draft where it was left.
    """

    def __init__(self, validator: RegistrationValidator, coordinator: Optional[SubmissionCoordinator] = None):
        self.validator = validator
        self.coordinator = coordinator

    def _form(self, state: RegistrationState) -> FormStateManager:
        return FormStateManager(state, self.validator)

    @staticmethod
    def _done(form: FormStateManager) -> RegistrationState:
        form.state.action = None
        return form.state

    def collect_node(self, state: RegistrationState) -> RegistrationState:
        form = self._form(state)
        for name, value in state.edits.items():
            form.type_into(name, value)
        for slot, files in state.uploads.items():
            for f in files:
                form.attach_file(slot, f)

        form.state.edits = {}
        form.state.uploads = {}
        form.state.missing_fields = self.validator.compute_missing_fields(form.get_all_values())
        return form.state

    def advance_node(self, state: RegistrationState) -> RegistrationState:
        form = self._form(state)
        SectionNavigator(form, self.validator).next()
        return self._done(form)

    def retreat_node(self, state: RegistrationState) -> RegistrationState:
        form = self._form(state)
        SectionNavigator(form, self.validator).previous()
        return self._done(form)

    def submit_node(self, state: RegistrationState) -> RegistrationState:
        form = self._form(state)
        navigator = SectionNavigator(form, self.validator)
        if self.coordinator is None:
            form.state.notice = "Submission is not available for this draft"
        elif not navigator.is_terminal:
            form.state.notice = "Complete every section before submitting"
        elif form.state.receipt is None:
            self.coordinator.submit(form)
        return self._done(form)

    @staticmethod
    def route_action(state: RegistrationState) -> Literal["next", "previous", "submit", "end"]:
        return state.action or "end"

    def build(self) -> StateGraph:
        g = StateGraph(RegistrationState)

        g.add_node("collect", self.collect_node)
        g.add_node("advance", self.advance_node)
        g.add_node("retreat", self.retreat_node)
        g.add_node("submit", self.submit_node)

        g.add_edge(START, "collect")
        g.add_conditional_edges(
            "collect",
            self.route_action,
            {"next": "advance", "previous": "retreat", "submit": "submit", "end": END},
        )
        g.add_edge("advance", END)
        g.add_edge("retreat", END)
        g.add_edge("submit", END)

        return g

    def compile(self, checkpointer: Any):
        return self.build().compile(checkpointer=checkpointer)
