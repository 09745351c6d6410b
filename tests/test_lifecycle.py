import pytest

from startech_api.app.core.errors import ValidationError
from startech_api.app.services import lifecycle


@pytest.mark.parametrize(
    "entity_type, status",
    [
        ("order", "pending"),
        ("order", "cancelled"),
        ("service", "waiting-parts"),
        ("task", "review"),
        ("ticket", "waiting-customer"),
    ],
)
def test_statuses_in_set_are_valid(entity_type, status):
    assert lifecycle.is_valid_status(entity_type, status)


@pytest.mark.parametrize(
    "entity_type, status",
    [("order", "done"), ("task", "resolved"), ("ticket", "received"), ("service", None), ("invoice", "open")],
)
def test_statuses_outside_set_are_invalid(entity_type, status):
    assert not lifecycle.is_valid_status(entity_type, status)


def test_validate_status_raises_validation_error():
    with pytest.raises(ValidationError):
        lifecycle.validate_status("task", "shipped")


def test_default_statuses():
    assert lifecycle.default_status("order") == "pending"
    assert lifecycle.default_status("service") == "received"
    assert lifecycle.default_status("task") == "todo"
    assert lifecycle.default_status("ticket") == "open"


@pytest.mark.parametrize(
    "entity_type, status",
    [(entity_type, status) for entity_type, statuses in lifecycle.STATUSES.items() for status in statuses],
)
def test_every_status_has_a_label(entity_type, status):
    label = lifecycle.translate_status(status)
    assert label
    assert label != status


def test_translate_known_and_unknown_status():
    assert lifecycle.translate_status("in-progress") == "Në progres"
    assert lifecycle.translate_status("closed") == "Mbyllur"
    assert lifecycle.translate_status("something-else") == "something-else"


def test_entering_terminal_status_stamps_completion():
    updates = lifecycle.apply_status_change("service", {"completed_at": None}, "completed", "2024-05-01T10:00:00")
    assert updates == {"status": "completed", "completed_at": "2024-05-01T10:00:00"}


def test_existing_stamp_is_kept_between_terminal_statuses():
    current = {"completed_at": "2024-05-01T10:00:00"}
    updates = lifecycle.apply_status_change("service", current, "delivered", "2024-05-03T09:00:00")
    assert updates == {"status": "delivered"}


def test_leaving_terminal_status_clears_stamp():
    current = {"completed_at": "2024-05-01T10:00:00"}
    updates = lifecycle.apply_status_change("task", current, "in-progress", "2024-05-02T10:00:00")
    assert updates == {"status": "in-progress", "completed_at": None}


def test_tickets_use_resolved_at():
    updates = lifecycle.apply_status_change("ticket", {}, "resolved", "2024-05-01T10:00:00")
    assert updates["resolved_at"] == "2024-05-01T10:00:00"
