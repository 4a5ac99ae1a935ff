import pytest
from langgraph.checkpoint.memory import InMemorySaver

from registration.fields import CHEQUE_SLOT, SECTIONS
from registration.graph import RegistrationGraphFactory
from registration.state import RegistrationState


@pytest.fixture
def checkpointer():
    return InMemorySaver()


@pytest.fixture
def factory(validator, coordinator):
    return RegistrationGraphFactory(validator, coordinator)


def _snapshot(graph, config) -> RegistrationState:
    return RegistrationState.model_validate(graph.get_state(config).values)


def test_next_on_empty_draft_stays_and_reports_errors(factory, checkpointer):
    graph = factory.compile(checkpointer=checkpointer)
    config = {"configurable": {"thread_id": "draft-empty"}}

    graph.invoke({"action": "next"}, config)
    state = _snapshot(graph, config)

    assert state.current_section == 0
    assert set(state.local_errors) == set(SECTIONS[0].required_fields)
    assert state.focus_field == "collegeName"
    assert state.action is None


def test_edits_then_next_advances(factory, checkpointer, section_0):
    graph = factory.compile(checkpointer=checkpointer)
    config = {"configurable": {"thread_id": "draft-advance"}}

    graph.invoke({"action": "next"}, config)
    graph.invoke({"edits": section_0, "action": "next"}, config)
    state = _snapshot(graph, config)

    assert state.current_section == 1
    assert state.local_errors == {}
    assert state.edits == {}
    assert state.missing_fields == sorted(SECTIONS[1].required_fields)


def test_edits_go_through_keystroke_filter(factory, checkpointer):
    graph = factory.compile(checkpointer=checkpointer)
    config = {"configurable": {"thread_id": "draft-filter"}}

    graph.invoke({"edits": {"accountNumber": "1234-5678-90"}}, config)

    assert _snapshot(graph, config).values["accountNumber"] == "1234567890"


def test_draft_resumes_from_checkpoint(validator, coordinator, checkpointer, section_0):
    config = {"configurable": {"thread_id": "draft-resume"}}
    first = RegistrationGraphFactory(validator, coordinator).compile(checkpointer=checkpointer)
    first.invoke({"edits": section_0, "action": "next"}, config)

    resumed = RegistrationGraphFactory(validator, coordinator).compile(checkpointer=checkpointer)
    resumed.invoke({"edits": {"bankName": "Canara Bank"}}, config)
    state = _snapshot(resumed, config)

    assert state.current_section == 1
    assert state.values["collegeName"] == section_0["collegeName"]
    assert state.values["bankName"] == "Canara Bank"


def test_previous_clears_errors(factory, checkpointer, section_0):
    graph = factory.compile(checkpointer=checkpointer)
    config = {"configurable": {"thread_id": "draft-previous"}}
    graph.invoke({"edits": section_0, "action": "next"}, config)
    graph.invoke({"action": "submit"}, config)
    assert _snapshot(graph, config).local_errors

    graph.invoke({"action": "previous"}, config)
    state = _snapshot(graph, config)

    assert state.current_section == 0
    assert state.local_errors == {}
    assert state.remote_errors == {}


def test_submit_before_last_section_is_refused(factory, checkpointer, registry):
    graph = factory.compile(checkpointer=checkpointer)
    config = {"configurable": {"thread_id": "draft-early"}}

    graph.invoke({"action": "submit"}, config)

    assert _snapshot(graph, config).notice == "Complete every section before submitting"
    assert registry.list_all() == []


def test_full_draft_submits_once(factory, checkpointer, registry, section_0, section_1, cheque):
    graph = factory.compile(checkpointer=checkpointer)
    config = {"configurable": {"thread_id": "draft-submit"}}

    graph.invoke({"edits": section_0, "action": "next"}, config)
    graph.invoke({"edits": section_1, "uploads": {CHEQUE_SLOT: [cheque]}}, config)
    graph.invoke({"action": "submit"}, config)
    state = _snapshot(graph, config)

    assert state.receipt is not None
    assert state.receipt.college_id == "COL001"
    assert state.notice is None

    graph.invoke({"action": "submit"}, config)
    assert len(registry.list_all()) == 1
