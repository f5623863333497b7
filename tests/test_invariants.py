"""Randomized operation sequences: positions stay dense after every step."""

import random

import pytest

from kanban.services.kanban_service import KanbanService
from simulation import is_dense


async def _assert_board_dense(service: KanbanService, board_id: str) -> None:
    columns = await service.list_columns(board_id)
    assert is_dense(c.position for c in columns), [(c.name, c.position) for c in columns]
    for column in columns:
        cards = await service.list_column_cards(column.id)
        assert is_dense(c.position for c in cards), [(c.title, c.position) for c in cards]
        assert all(c.board_id == board_id for c in cards)


async def _step(service: KanbanService, rng: random.Random, board_id: str, step: int) -> None:
    columns = await service.list_columns(board_id)
    cards = await service.list_cards(board_id)
    op = rng.choice(
        ["add_column", "add_card", "add_card", "move", "move", "reorder", "reorder_column",
         "delete_card", "delete_column", "set_order"]
    )

    if op == "add_column" or not columns:
        position = rng.choice([None, rng.randint(0, len(columns) + 2)])
        await service.create_column(board_id, f"col {step}", position)
    elif op == "add_card" or not cards:
        column = rng.choice(columns)
        await service.create_card(board_id, column.id, f"card {step}")
    elif op == "move":
        card = rng.choice(cards)
        target = rng.choice(columns)
        await service.move_card(card.id, target.id, rng.randint(0, 6))
    elif op == "reorder":
        card = rng.choice(cards)
        await service.reorder_card(card.id, rng.randint(0, 6))
    elif op == "reorder_column":
        column = rng.choice(columns)
        await service.reorder_column(column.id, rng.randint(0, len(columns) + 1))
    elif op == "delete_card":
        await service.delete_card(rng.choice(cards).id)
    elif op == "delete_column" and len(columns) > 1:
        await service.delete_column(rng.choice(columns).id, force=True)
    elif op == "set_order":
        column = rng.choice(columns)
        ids = [c.id for c in await service.list_column_cards(column.id)]
        rng.shuffle(ids)
        await service.set_card_order(column.id, ids[: rng.randint(0, len(ids))])


@pytest.mark.parametrize("seed", range(5))
@pytest.mark.asyncio
async def test_random_operations_keep_positions_dense(service: KanbanService, seed: int) -> None:
    rng = random.Random(seed)
    board = await service.create_board(f"board {seed}")

    for step in range(40):
        await _step(service, rng, board.id, step)
        await _assert_board_dense(service, board.id)


@pytest.mark.asyncio
async def test_delete_preserves_relative_order(service: KanbanService) -> None:
    board = await service.create_board("B")
    column = await service.create_column(board.id, "todo")
    created = [await service.create_card(board.id, column.id, str(i)) for i in range(6)]

    await service.delete_card(created[1].id)
    await service.delete_card(created[4].id)

    remaining = await service.list_column_cards(column.id)
    assert [c.title for c in remaining] == ["0", "2", "3", "5"]
    assert [c.position for c in remaining] == [0, 1, 2, 3]


@pytest.mark.parametrize(("source", "target"), [(0, 3), (3, 0), (1, 2), (2, 2)])
@pytest.mark.asyncio
async def test_move_within_column_equals_reorder(
    service: KanbanService, source: int, target: int
) -> None:
    board = await service.create_board("B")
    left = await service.create_column(board.id, "left")
    right = await service.create_column(board.id, "right")
    left_cards = [await service.create_card(board.id, left.id, str(i)) for i in range(4)]
    right_cards = [await service.create_card(board.id, right.id, str(i)) for i in range(4)]

    await service.move_card(left_cards[source].id, left.id, target)
    await service.reorder_card(right_cards[source].id, target)

    left_titles = [c.title for c in await service.list_column_cards(left.id)]
    right_titles = [c.title for c in await service.list_column_cards(right.id)]
    assert left_titles == right_titles
