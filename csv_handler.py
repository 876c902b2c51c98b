import csv
import logging
import os
import re
from typing import Iterable, List, Optional

import pandas as pd

from batch_store import MAX_SCORE, MIN_SCORE, BatchStore
from errors import StorageError
from models import Student

COLUMNS = ['sap', 'name', 'marks', 'allocated_batch']
UNALLOCATED = -1

_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')


def sanitize_name(name: str) -> str:
    """Replace field and record separators so a name always stays one field."""
    return name.replace(',', ' ').replace('\r', ' ').replace('\n', ' ')


def parse_leading_int(value: str) -> Optional[int]:
    """Parse the integer prefix of a field the way atoi does; None if there is none."""
    match = _LEADING_INT.match(value or '')
    if not match:
        return None
    return int(match.group(1))


def _keep_known_fields(fields: List[str]) -> List[str]:
    # Extra trailing fields are ignored
    return fields[:len(COLUMNS)]


class StudentCsvHandler:
    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def save(self, path, students: Iterable[Student]):
        """
        Write the roster to a comma-separated file.

        Only each student's batch index is stored (-1 when unallocated); batch
        names and capacities are not persisted. Fields are written as-is, with
        no quoting or escaping, so a name is stored exactly as sanitize_name()
        returns it.
        """
        rows = []
        for student in students:
            rows.append({
                'sap': student.key,
                'name': sanitize_name(student.name),
                'marks': student.score,
                'allocated_batch': UNALLOCATED if student.batch_index is None else student.batch_index
            })
        df = pd.DataFrame(rows, columns=COLUMNS)
        lines = df.astype(str).agg(','.join, axis=1) if len(df) else []

        try:
            with open(path, 'w', encoding='utf-8', newline='') as f:
                f.write(','.join(COLUMNS) + '\n')
                for line in lines:
                    f.write(line + '\n')
        except OSError as e:
            self.logger.error(f"Could not open {path} for writing: {e}")
            raise StorageError(path, f"could not open for writing ({e})")

        self.logger.info(f"Saved {len(df)} students to {path}")

    def load(self, path) -> List[Student]:
        """
        Read a roster written by save().

        The first line is always treated as the header and skipped. Records are
        read field by field: a missing or unparseable score becomes 0, a missing
        or negative batch index means unallocated. Backslashes and double quotes
        are ordinary characters.
        """
        try:
            df = pd.read_csv(
                path,
                header=None,
                skiprows=1,
                names=COLUMNS,
                index_col=False,
                dtype=str,
                keep_default_na=False,
                quoting=csv.QUOTE_NONE,
                engine='python',
                on_bad_lines=_keep_known_fields,
            )
        except pd.errors.EmptyDataError:
            df = pd.DataFrame(columns=COLUMNS)
        except (OSError, UnicodeDecodeError) as e:
            self.logger.error(f"Could not open {path} for reading: {e}")
            raise StorageError(path, f"could not open for reading ({e})")

        df = df.fillna('')

        students = []
        seen = set()
        for line_number, row in enumerate(df.itertuples(index=False), start=2):
            key = str(row.sap)
            if not key.strip():
                self.logger.warning(f"{path}:{line_number}: skipping record without SAP ID")
                continue
            if key in seen:
                self.logger.warning(f"{path}:{line_number}: skipping duplicate SAP ID {key}")
                continue
            seen.add(key)

            students.append(Student(
                key=key,
                name=str(row.name),
                score=self._parse_score(path, line_number, row.marks),
                batch_index=self._parse_batch_index(row.allocated_batch)
            ))

        self.logger.info(f"Loaded {len(students)} students from {path}")
        return students

    def save_store(self, store: BatchStore, path):
        self.save(path, store.list_students())

    def load_store(self, store: BatchStore, path) -> List[Student]:
        """
        Replace the store's roster with the file's contents and drop all batches.
        Loaded batch indices are kept, so they point at nothing until batches
        are added again and a new allocation runs. A zero-byte file leaves the
        store untouched.
        """
        students = self.load(path)
        if not students and os.path.getsize(path) == 0:
            # No header line at all: nothing was ever saved here
            self.logger.warning(f"{path} is empty, keeping the current roster")
            return students
        store.replace_students(students)
        return students

    def _parse_score(self, path, line_number: int, value: str) -> int:
        score = parse_leading_int(value)
        if score is None:
            return 0
        if not MIN_SCORE <= score <= MAX_SCORE:
            self.logger.warning(f"{path}:{line_number}: marks {score} outside {MIN_SCORE}-{MAX_SCORE}")
        return score

    def _parse_batch_index(self, value: str) -> Optional[int]:
        index = parse_leading_int(value)
        if index is None or index < 0:
            return None
        return index
