import pytest
from pydantic import ValidationError as PydanticValidationError

from kanban.core.constants import Priority
from kanban.core.exceptions.domain import ValidationError
from kanban.models.types import LabelList
from kanban.schemas.base import describe_errors, validate_schema
from kanban.schemas.card import CardCreate, CardUpdate
from kanban.schemas.column import ColumnUpdate
from kanban.schemas.patch import CLEAR, UNCHANGED, CardPatch, SetTo, resolve


def test_card_update_distinguishes_absent_from_null() -> None:
    patch = CardUpdate.model_validate(
        {"description": None, "assignee": "kim", "labels": []}
    ).to_patch()

    assert patch.title is UNCHANGED
    assert patch.description is CLEAR
    assert patch.assignee == SetTo("kim")
    assert patch.labels == SetTo([])
    assert patch.due_date is UNCHANGED
    assert patch.priority is UNCHANGED
    assert not patch.is_empty


def test_empty_card_update_is_empty_patch() -> None:
    assert CardUpdate().to_patch().is_empty
    assert CardPatch().is_empty


def test_card_update_trims_title() -> None:
    patch = CardUpdate(title="  done  ").to_patch()
    assert patch.title == SetTo("done")


def test_resolve() -> None:
    assert resolve(UNCHANGED, "old") == "old"
    assert resolve(CLEAR, "old") is None
    assert resolve(CLEAR, ["a"], cleared=[]) == []
    assert resolve(SetTo("new"), "old") == "new"


def test_card_create_defaults() -> None:
    data = CardCreate(board_id="b", column_id="c", title="t", labels=None, priority=None)

    assert data.labels == []
    assert data.priority == Priority.MEDIUM
    assert data.description is None


def test_card_create_rejects_unknown_fields() -> None:
    with pytest.raises(PydanticValidationError):
        CardCreate(board_id="b", column_id="c", title="t", position=2)


def test_validate_schema_raises_domain_error_with_readable_message() -> None:
    with pytest.raises(ValidationError) as exc_info:
        validate_schema(
            CardCreate,
            {"board_id": "b", "column_id": "c", "title": "t", "labels": ["x"] * 11},
        )

    assert "maximum 10 labels" in exc_info.value.message
    assert "Value error" not in exc_info.value.message


def test_describe_errors_prefixes_location() -> None:
    with pytest.raises(PydanticValidationError) as exc_info:
        CardCreate.model_validate({"board_id": "b", "column_id": "c", "title": "t", "priority": "x"})

    assert describe_errors(exc_info.value).startswith("priority: ")


def test_column_update_requires_a_field() -> None:
    with pytest.raises(PydanticValidationError):
        ColumnUpdate()

    assert ColumnUpdate(position=0).position == 0
    assert ColumnUpdate(name=" Done ").name == "Done"


@pytest.mark.parametrize(
    ("stored", "expected"),
    [
        (None, []),
        ("", []),
        ('["b", "a"]', ["b", "a"]),
        ("{not json", []),
        ('{"a": 1}', []),
        ('"text"', []),
    ],
)
def test_label_list_reads_leniently(stored, expected) -> None:
    assert LabelList().process_result_value(stored, None) == expected


def test_label_list_writes_json_array() -> None:
    column_type = LabelList()
    assert column_type.process_bind_param(None, None) == "[]"
    assert column_type.process_bind_param(["x", "y"], None) == '["x", "y"]'


def test_blank_description_in_update_clears() -> None:
    patch = CardUpdate(description="", assignee="", due_date="").to_patch()

    assert patch.description is CLEAR
    assert patch.assignee is CLEAR
    assert patch.due_date is CLEAR


@pytest.mark.parametrize("value", [1, 2.0, ["x"], b"bytes"])
def test_wrongly_typed_text_is_a_validation_error(value) -> None:
    with pytest.raises(ValidationError) as exc_info:
        validate_schema(CardCreate, {"board_id": "b", "column_id": "c", "title": value})

    assert "must be a string" in exc_info.value.message


def test_wrongly_typed_labels_are_a_validation_error() -> None:
    with pytest.raises(ValidationError) as exc_info:
        validate_schema(CardCreate, {"board_id": "b", "column_id": "c", "title": "t", "labels": 5})

    assert "must be a list" in exc_info.value.message
