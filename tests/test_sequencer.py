import re

import pytest

from startech_api.app.services.sequencer import IdSequencer, current_year


def _insert_orders(db, *ids):
    with db.cursor() as cursor:
        for order_id in ids:
            cursor.execute("INSERT INTO orders (id) VALUES (?)", (order_id,))


def test_first_identifier_of_the_year(db):
    assert IdSequencer(db).next_id("PRS", "2024") == "PRS-2024-001"


def test_increments_highest_identifier(db):
    _insert_orders(db, "PRS-2024-001", "PRS-2024-007", "PRS-2024-003")
    assert IdSequencer(db).next_id("PRS", "2024") == "PRS-2024-008"


def test_other_years_are_ignored(db):
    _insert_orders(db, "PRS-2023-041")
    assert IdSequencer(db).next_id("PRS", "2024") == "PRS-2024-001"


def test_unparseable_suffix_restarts_counter(db):
    _insert_orders(db, "PRS-2024-005", "PRS-2024-abc")
    assert IdSequencer(db).next_id("PRS", "2024") == "PRS-2024-001"


def test_text_ordering_after_999_is_kept(db):
    # '999' sorts after '1000' as text, so the sequence stalls on 1000.
    _insert_orders(db, "PRS-2024-999", "PRS-2024-1000")
    assert IdSequencer(db).next_id("PRS", "2024") == "PRS-2024-1000"


def test_each_prefix_uses_its_own_table(db):
    _insert_orders(db, "PRS-2024-004")
    sequencer = IdSequencer(db)
    assert sequencer.next_id("SRV", "2024") == "SRV-2024-001"
    assert sequencer.next_id("TSK", "2024") == "TSK-2024-001"
    assert sequencer.next_id("TIK", "2024") == "TIK-2024-001"


def test_defaults_to_current_year(db):
    new_id = IdSequencer(db).next_id("TIK")
    assert re.fullmatch(rf"TIK-{current_year()}-\d{{3}}", new_id)


def test_unknown_prefix_is_rejected(db):
    with pytest.raises(ValueError):
        IdSequencer(db).next_id("XYZ", "2024")
