"""Shuffle and de-duplication helpers shared by the recommendation code."""
import random
from typing import Callable, Hashable, Iterable, TypeVar

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


def shuffled(items: Iterable[T], rng: random.Random | None = None) -> list[T]:
    """Return a new list with the items in Fisher-Yates shuffle order."""
    result = list(items)
    (rng or random).shuffle(result)
    return result


def collect_unique(
    candidates: Iterable[K],
    resolve: Callable[[K], T | None],
    limit: int,
    seen: set[K] | None = None,
) -> list[tuple[K, T]]:
    """Walk candidates in order and keep the first `limit` resolvable, unseen ones.

    `seen` is updated in place so several walks can share one exclusion set.
    """
    seen = seen if seen is not None else set()
    picked: list[tuple[K, T]] = []
    for key in candidates:
        if len(picked) >= limit:
            break
        if key in seen:
            continue
        value = resolve(key)
        if value is None:
            continue
        seen.add(key)
        picked.append((key, value))
    return picked
