import logging
from typing import Dict, Iterable, List, Optional

from errors import (
    DuplicateKeyError, InvalidInputError, NotFoundError, ResourceExhaustedError
)
from models import Batch, Student

MIN_SCORE = 0
MAX_SCORE = 100
DEFAULT_MAX_STUDENTS = 1000
DEFAULT_MAX_BATCHES = 100


class BatchStore:
    """
    Owns the student roster and the batch list for one session.

    Students are kept in insertion order, keyed by their immutable key. Batches
    are kept in insertion order; that order drives the allocator's rotation and
    a student's batch_index is a position in it.
    """

    def __init__(self, max_students: int = DEFAULT_MAX_STUDENTS,
                 max_batches: int = DEFAULT_MAX_BATCHES):
        self.logger = logging.getLogger(__name__)
        self.max_students = max_students
        self.max_batches = max_batches
        self._students: Dict[str, Student] = {}
        self._batches: List[Batch] = []

    @property
    def student_count(self) -> int:
        return len(self._students)

    @property
    def batch_count(self) -> int:
        return len(self._batches)

    # Student operations

    def add_student(self, key: str, name: str, score: int) -> Student:
        if self.student_count >= self.max_students:
            raise InvalidInputError(
                f"Database is full (max {self.max_students}). Cannot add student '{key}'"
            )
        self._check_key(key)
        if key in self._students:
            raise DuplicateKeyError(key)
        self._check_name(name)
        self._check_score(score)

        student = Student(key, name, score)
        try:
            self._students[key] = student
        except MemoryError:
            raise ResourceExhaustedError(f"Out of memory while adding student '{key}'")

        self.logger.debug(f"Added student {key}")
        return student

    def update_student(self, key: str, name: Optional[str] = None,
                       score: Optional[int] = None) -> Student:
        """
        Replace a student's name and/or score. Omitted fields are left as they
        are, and nothing changes unless every supplied field is valid.
        """
        student = self._students.get(key)
        if student is None:
            raise NotFoundError(key)
        if name is not None:
            self._check_name(name)
        if score is not None:
            self._check_score(score)

        if name is not None:
            student.name = name
        if score is not None:
            student.score = score
        return student

    def delete_student(self, key: str) -> Student:
        student = self._students.get(key)
        if student is None:
            raise NotFoundError(key)

        batch = self.batch_for(student)
        if batch is not None and key in batch.members:
            batch.members.remove(key)
        del self._students[key]

        self.logger.debug(f"Deleted student {key}")
        return student

    def lookup_student(self, key: str) -> Optional[Student]:
        return self._students.get(key)

    def list_students(self) -> List[Student]:
        return list(self._students.values())

    def replace_students(self, students: Iterable[Student]):
        """
        Swap in a whole new roster and drop every batch. Batch indices carried
        by the incoming students are kept even though no batch exists for them
        until batches are re-added and an allocation runs.
        """
        roster = {}
        for student in students:
            if student.key in roster:
                raise DuplicateKeyError(student.key)
            roster[student.key] = student
        self._students = roster
        self._batches = []

    # Batch operations

    def add_batch(self, name: str, capacity: int) -> Batch:
        if self.batch_count >= self.max_batches:
            raise InvalidInputError(f"Cannot add more batches (max {self.max_batches})")
        if not isinstance(name, str) or not name.strip():
            raise InvalidInputError("Batch name cannot be empty")
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise InvalidInputError(f"Capacity of batch '{name}' must be > 0, got {capacity!r}")

        batch = Batch(name, capacity)
        try:
            self._batches.append(batch)
        except MemoryError:
            raise ResourceExhaustedError(f"Out of memory while adding batch '{name}'")
        return batch

    def list_batches(self) -> List[Batch]:
        return list(self._batches)

    def get_batch(self, index: Optional[int]) -> Optional[Batch]:
        if index is None or not 0 <= index < len(self._batches):
            return None
        return self._batches[index]

    def batch_for(self, student: Student) -> Optional[Batch]:
        """Return the batch a student is linked to, or None if unassigned or stale."""
        return self.get_batch(student.batch_index)

    def members_of(self, batch: Batch) -> List[Student]:
        return [self._students[key] for key in batch.members if key in self._students]

    # Allocation hooks

    def reset_allocations(self):
        for student in self._students.values():
            student.batch_index = None
        for batch in self._batches:
            batch.members = []

    def place(self, key: str, batch_index: int):
        student = self._students.get(key)
        if student is None:
            raise NotFoundError(key)
        if student.batch_index is not None:
            raise InvalidInputError(f"Student '{key}' is already placed in batch {student.batch_index}")
        batch = self.get_batch(batch_index)
        if batch is None:
            raise InvalidInputError(f"No batch at index {batch_index}")
        if not batch.has_room:
            raise InvalidInputError(f"Batch '{batch.name}' is full ({batch.capacity})")

        batch.members.append(key)
        student.batch_index = batch_index

    # Validation helpers

    def _check_key(self, key):
        if not isinstance(key, str) or not key.strip():
            raise InvalidInputError("SAP ID cannot be empty")

    def _check_name(self, name):
        if not isinstance(name, str) or not name.strip():
            raise InvalidInputError("Name cannot be empty")

    def _check_score(self, score):
        if isinstance(score, bool) or not isinstance(score, int):
            raise InvalidInputError(f"Marks must be an integer, got {score!r}")
        if not MIN_SCORE <= score <= MAX_SCORE:
            raise InvalidInputError(f"Marks must be between {MIN_SCORE} and {MAX_SCORE}, got {score}")
