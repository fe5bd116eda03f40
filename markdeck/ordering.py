"""
MarkDeck — Slide Ordering Maintainer
=====================================

What:  Keeps every presentation's slide `order` values a dense permutation
       of 0..N-1 under append, insert, delete, reorder and duplicate.
How:   Pure planners. Each takes the current `{slide_id: order}` mapping and
       returns the new order of every slide that changes. No I/O: the server
       writes plans with services/ordering_service.py, the client store
       applies them to its in-memory snapshot for optimistic updates.
Who:   SlideService (server) and PresentationStore (client).

Shift Rules (O = current position, P/T = requested position, N = slide count):
    append          new := N                    nothing else moves
    insert at P     order >= P        → +1       new := P
    delete at P     order >  P        → -1
    reorder O → T   T > O: O < order <= T → -1   moved := T
                    T < O: T <= order <  O → +1  moved := T
                    T == O: no-op
    duplicate O     insert at O + 1

Position Normalisation:
    Negative positions are rejected with ValidationError. Positions past the
    end are clamped: insert to N (identical to append), reorder to N-1.
"""

from typing import Dict, Hashable, Iterable, List, Mapping, Tuple, TypeVar

from markdeck.exceptions import NotFoundError, ValidationError

K = TypeVar("K", bound=Hashable)

# Plan: new order for every slide whose order changes
OrderPlan = Dict[K, int]


# ══════════════════════════════════════════════════════════════════════════
# Pure planners
# ══════════════════════════════════════════════════════════════════════════

def is_dense(orders: Iterable[int]) -> bool:
    """True when `orders` is exactly {0, ..., N-1} with no duplicates."""
    values = list(orders)
    return sorted(values) == list(range(len(values)))


def validate_position(position: int, field: str = "order") -> None:
    if position is None or position < 0:
        raise ValidationError(
            message=f"Position must be a non-negative integer, got {position!r}",
            field=field,
        )


def next_append_position(orders: Iterable[int]) -> int:
    """Order for a slide appended at the end: max + 1, or 0 when empty."""
    values = list(orders)
    return max(values) + 1 if values else 0


def plan_insert(current: Mapping[K, int], position: int) -> Tuple[int, OrderPlan]:
    """
    Plan inserting one new slide at `position`.

    Returns:
        (position actually used, plan for the existing slides)
    """
    validate_position(position)
    position = min(position, len(current))
    plan = {key: order + 1 for key, order in current.items() if order >= position}
    return position, plan


def plan_append(current: Mapping[K, int]) -> Tuple[int, OrderPlan]:
    return next_append_position(current.values()), {}


def plan_delete(current: Mapping[K, int], key: K) -> OrderPlan:
    """Plan removing `key`; later slides move down by one."""
    if key not in current:
        raise NotFoundError(resource="slide", resource_id=str(key))
    removed = current[key]
    return {
        other: order - 1
        for other, order in current.items()
        if other != key and order > removed
    }


def plan_reorder(current: Mapping[K, int], key: K, target: int) -> OrderPlan:
    """
    Plan moving `key` to `target`.

    Example (4 slides a,b,c,d at 0,1,2,3; move a → 2):
        {a: 2, b: 0, c: 1}     d keeps 3
    """
    if key not in current:
        raise NotFoundError(resource="slide", resource_id=str(key))
    validate_position(target, field="newOrder")
    target = min(target, len(current) - 1)
    source = current[key]

    if target == source:
        return {}

    plan: OrderPlan = {}
    if target > source:
        for other, order in current.items():
            if source < order <= target:
                plan[other] = order - 1
    else:
        for other, order in current.items():
            if target <= order < source:
                plan[other] = order + 1
    plan[key] = target
    return plan


def plan_duplicate(current: Mapping[K, int], key: K) -> Tuple[int, OrderPlan]:
    """Plan inserting a copy of `key` directly after it."""
    if key not in current:
        raise NotFoundError(resource="slide", resource_id=str(key))
    return plan_insert(current, current[key] + 1)


def apply_plan(current: Mapping[K, int], plan: Mapping[K, int]) -> Dict[K, int]:
    """Returns `current` with `plan` applied (used for in-memory snapshots)."""
    merged = dict(current)
    merged.update(plan)
    return merged


def reorder_list(items: List, source: int, target: int) -> List:
    """
    Moves `items[source]` to index `target` and returns a new list.

    The list-shaped twin of plan_reorder(), for callers that hold slides in
    display order rather than as an id → order mapping.
    """
    validate_position(target, field="newOrder")
    if not items:
        return []
    target = min(target, len(items) - 1)
    moved = list(items)
    item = moved.pop(source)
    moved.insert(target, item)
    return moved

