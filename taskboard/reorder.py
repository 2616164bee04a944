"""Reordering of cards and columns after a drag and drop.

``move_card`` and ``move_column`` are pure: they take a columns tuple and return
a new one, or None when the move does nothing or cannot be applied.
``resolve_drop`` turns a drag-end event (dragged id, drop target id) into one of
those moves.
"""

from dataclasses import dataclass, replace
from typing import Sequence

import structlog

from taskboard.models import Column, reindex_cards, reindex_columns

logger = structlog.get_logger()


@dataclass(frozen=True)
class CardMove:
    """Arguments for ``move_card``."""

    card_id: str
    from_column_id: str
    to_column_id: str
    destination_index: int


@dataclass(frozen=True)
class ColumnMove:
    """Arguments for ``move_column``."""

    column_id: str
    new_index: int


def _clamp(index: int, upper: int) -> int:
    return max(0, min(index, upper))


def _index_of_column(columns: Sequence[Column], column_id: str) -> int | None:
    for index, column in enumerate(columns):
        if column.id == column_id:
            return index
    return None


def _locate_card(columns: Sequence[Column], card_id: str) -> tuple[int, int] | None:
    """Return ``(column_index, card_index)`` of a card, or None."""
    for column_index, column in enumerate(columns):
        found = column.find_card(card_id)
        if found is not None:
            return column_index, found[0]
    return None


def move_card(
    columns: Sequence[Column],
    card_id: str,
    from_column_id: str,
    to_column_id: str,
    destination_index: int,
) -> tuple[Column, ...] | None:
    """Move a card within or across columns.

    Across columns, ``destination_index`` is the position in the destination
    column the card ends up at.

    Within one column, ``destination_index`` is the position, counted before the
    card is taken out, of the card it should land in front of. Taking the card
    out shifts every later card up by one, so when the card moves down the
    insertion point is one less. With ``[A, B, C, D]``, moving A to index 2
    gives ``[B, A, C, D]`` and moving D to index 1 gives ``[A, D, B, C]``.

    Args:
        columns: Current columns of the board
        card_id: Card being moved
        from_column_id: Column the card is in now
        to_column_id: Column the card should end up in
        destination_index: Target position, see above

    Returns:
        New columns with card ``order`` fields reindexed, or None if the card or
        destination column is missing or the order would not change.
    """
    source_index = _index_of_column(columns, from_column_id)
    target_index = _index_of_column(columns, to_column_id)
    if source_index is None or target_index is None:
        logger.debug("Card move abandoned, column not found", from_column_id=from_column_id, to_column_id=to_column_id)
        return None

    source = columns[source_index]
    found = source.find_card(card_id)
    if found is None:
        logger.debug("Card move abandoned, card not in source column", card_id=card_id, column_id=from_column_id)
        return None
    card_index, card = found
    remaining = source.cards[:card_index] + source.cards[card_index + 1 :]

    result = list(columns)
    if source_index == target_index:
        insert_at = destination_index - 1 if card_index < destination_index else destination_index
        insert_at = _clamp(insert_at, len(remaining))
        if insert_at == card_index:
            return None
        cards = remaining[:insert_at] + (card,) + remaining[insert_at:]
        result[source_index] = reindex_cards(replace(source, cards=cards))
    else:
        target = columns[target_index]
        insert_at = _clamp(destination_index, len(target.cards))
        moved = replace(card, column_id=target.id, order=insert_at)
        cards = target.cards[:insert_at] + (moved,) + target.cards[insert_at:]
        result[source_index] = reindex_cards(replace(source, cards=remaining))
        result[target_index] = reindex_cards(replace(target, cards=cards))

    logger.debug(
        "Card moved",
        card_id=card_id,
        from_column_id=from_column_id,
        to_column_id=to_column_id,
        index=insert_at,
    )
    return tuple(result)


def move_column(columns: Sequence[Column], column_id: str, new_index: int) -> tuple[Column, ...] | None:
    """Move a column to ``new_index`` and reindex every column's ``order``.

    Returns None if the column does not exist or would stay where it is.
    """
    old_index = _index_of_column(columns, column_id)
    if old_index is None:
        logger.debug("Column move abandoned, column not found", column_id=column_id)
        return None
    remaining = list(columns[:old_index]) + list(columns[old_index + 1 :])
    new_index = _clamp(new_index, len(remaining))
    if new_index == old_index:
        return None
    remaining.insert(new_index, columns[old_index])
    logger.debug("Column moved", column_id=column_id, old_index=old_index, new_index=new_index)
    return reindex_columns(remaining)


def resolve_drop(columns: Sequence[Column], active_id: str, over_id: str | None) -> CardMove | ColumnMove | None:
    """Translate a drop of ``active_id`` onto ``over_id`` into a move.

    ``over_id`` may name a column (drop on the column itself) or a card (drop on
    that card). A cancelled drag (``over_id`` None), a drop onto the dragged
    item itself, or ids that no longer exist resolve to None.
    """
    if over_id is None or over_id == active_id:
        return None

    card_location = _locate_card(columns, active_id)
    if card_location is not None:
        from_index, card_index = card_location
        from_column = columns[from_index]

        over_column_index = _index_of_column(columns, over_id)
        if over_column_index is not None:
            target = columns[over_column_index]
            return CardMove(active_id, from_column.id, target.id, len(target.cards))

        over_location = _locate_card(columns, over_id)
        if over_location is None:
            return None
        to_index, over_card_index = over_location
        to_column = columns[to_index]
        if to_index == from_index:
            # Dragging down lands after the target, dragging up lands on its slot.
            destination = over_card_index + 1 if card_index < over_card_index else over_card_index
            return CardMove(active_id, from_column.id, to_column.id, destination)
        return CardMove(active_id, from_column.id, to_column.id, over_card_index)

    if _index_of_column(columns, active_id) is not None:
        over_column_index = _index_of_column(columns, over_id)
        if over_column_index is None:
            over_location = _locate_card(columns, over_id)
            if over_location is None:
                return None
            over_column_index = over_location[0]
        return ColumnMove(active_id, over_column_index)

    return None
