"""Chronological ordering shared by every stage that needs first/last/previous"""

from typing import Callable, Dict, Hashable, Iterable, List, Optional, Tuple, TypeVar

from udp_balance.domain.models import Transaction

K = TypeVar("K", bound=Hashable)


def sort_chronologically(transactions: Optional[Iterable[Transaction]]) -> List[Transaction]:
    """
    Return a new list ordered by timestamp.

    Decorate-sort-undecorate on (timestamp, original index) so colliding
    timestamps keep their input order regardless of the sort primitive.
    None is treated as an empty sequence.
    """
    decorated = [(t.timestamp, index, t) for index, t in enumerate(transactions or ())]
    decorated.sort(key=lambda item: (item[0], item[1]))
    return [t for _, _, t in decorated]


def group_by(
    transactions: Optional[Iterable[Transaction]],
    key: Callable[[Transaction], K],
) -> List[Tuple[K, Tuple[Transaction, ...]]]:
    """
    Fold transactions into (key, members) pairs in first-appearance order.

    The working map is local to the call and the result is immutable.
    """
    groups: Dict[K, List[Transaction]] = {}
    for t in transactions or ():
        groups.setdefault(key(t), []).append(t)
    return [(k, tuple(members)) for k, members in groups.items()]
