# In-memory records for the batch allocation system.
# Students reference their batch by position in the store's batch list and
# batches reference their members by student key, so neither side holds the
# other's object directly.

from typing import List, Optional


class Student:
    def __init__(self, key: str, name: str, score: int, batch_index: Optional[int] = None):
        self.key = key
        self.name = name
        self.score = score
        self.batch_index = batch_index

    @property
    def is_allocated(self) -> bool:
        return self.batch_index is not None

    def to_dict(self) -> dict:
        return {
            'key': self.key,
            'name': self.name,
            'score': self.score,
            'batch_index': self.batch_index
        }

    def __eq__(self, other):
        if not isinstance(other, Student):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Student({self.key!r}, {self.name!r}, {self.score}, batch_index={self.batch_index})"


class Batch:
    def __init__(self, name: str, capacity: int):
        self.name = name
        self.capacity = capacity
        self.members: List[str] = []

    @property
    def filled(self) -> int:
        return len(self.members)

    @property
    def has_room(self) -> bool:
        return self.filled < self.capacity

    def __repr__(self):
        return f"Batch({self.name!r}, {self.filled}/{self.capacity})"
