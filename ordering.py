"""
Ordering strategies for batch allocation.

Each strategy takes a snapshot of students and returns their keys in the order
the allocator should place them. Sorted strategies are stable, so students that
compare equal keep their roster (insertion) order.
"""
import random
from typing import Callable, Dict, Iterable, List, Optional

from errors import InvalidInputError
from models import Student

DEFAULT_STRATEGY = 'score-desc'


def order_by_score_desc(students: Iterable[Student], rng: Optional[random.Random] = None) -> List[str]:
    return [s.key for s in sorted(students, key=lambda s: s.score, reverse=True)]


def order_by_name_asc(students: Iterable[Student], rng: Optional[random.Random] = None) -> List[str]:
    return [s.key for s in sorted(students, key=lambda s: s.name.lower())]


def order_by_name_desc(students: Iterable[Student], rng: Optional[random.Random] = None) -> List[str]:
    # reverse=True keeps equal names in roster order
    return [s.key for s in sorted(students, key=lambda s: s.name.lower(), reverse=True)]


def order_by_key_asc(students: Iterable[Student], rng: Optional[random.Random] = None) -> List[str]:
    return [s.key for s in sorted(students, key=lambda s: s.key.lower())]


def order_random(students: Iterable[Student], rng: Optional[random.Random] = None) -> List[str]:
    """
    Uniformly shuffled keys. Without an rng a fresh generator seeded from OS
    entropy is used, so runs are not reproducible; pass a seeded
    random.Random to fix the order.
    """
    keys = [s.key for s in students]
    if rng is None:
        rng = random.Random()
    rng.shuffle(keys)
    return keys


Strategy = Callable[..., List[str]]

STRATEGIES: Dict[str, Strategy] = {
    'score-desc': order_by_score_desc,
    'name-asc': order_by_name_asc,
    'name-desc': order_by_name_desc,
    'key-asc': order_by_key_asc,
    'random': order_random,
}


def get_strategy(name: str) -> Strategy:
    if name not in STRATEGIES:
        available = ", ".join(STRATEGIES)
        raise InvalidInputError(f"Unknown allocation strategy {name!r}. Available: {available}")
    return STRATEGIES[name]


def order_students(students: Iterable[Student], strategy: str = DEFAULT_STRATEGY,
                   rng: Optional[random.Random] = None) -> List[str]:
    return get_strategy(strategy)(list(students), rng=rng)
