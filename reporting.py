from typing import Dict, List, Optional

from batch_store import BatchStore


def total_capacity(store: BatchStore) -> int:
    return sum(batch.capacity for batch in store.list_batches())


def summarize(store: BatchStore) -> Dict:
    """
    Aggregate counts for the summary report. A student counts as allocated
    whenever it carries a batch index, including one left over from a load.
    """
    students = store.list_students()
    allocated = sum(1 for s in students if s.is_allocated)
    return {
        'total_students': len(students),
        'total_batches': store.batch_count,
        'allocated_count': allocated,
        'unallocated_count': len(students) - allocated,
        'total_capacity': total_capacity(store)
    }


def batch_roster(store: BatchStore) -> List[Dict]:
    roster = []
    for index, batch in enumerate(store.list_batches()):
        roster.append({
            'index': index,
            'name': batch.name,
            'capacity': batch.capacity,
            'filled': batch.filled,
            'members': [
                {'key': s.key, 'name': s.name, 'score': s.score}
                for s in store.members_of(batch)
            ]
        })
    return roster


def student_record(store: BatchStore, key: str) -> Optional[Dict]:
    student = store.lookup_student(key)
    if student is None:
        return None
    batch = store.batch_for(student)
    record = student.to_dict()
    record['batch_name'] = batch.name if batch is not None else None
    return record


def validate_store(store: BatchStore) -> List[str]:
    """
    Check the two-way links between students and batches.
    Returns a list of violations found; an empty list means the store is consistent.
    """
    violations = []
    batches = store.list_batches()

    for index, batch in enumerate(batches):
        if batch.filled > batch.capacity:
            violations.append(
                f"Batch {index} ({batch.name}): {batch.filled} members exceed capacity {batch.capacity}"
            )
        if len(set(batch.members)) != len(batch.members):
            violations.append(f"Batch {index} ({batch.name}): duplicate members")
        for key in batch.members:
            student = store.lookup_student(key)
            if student is None:
                violations.append(f"Batch {index} ({batch.name}): member {key} is not in the store")
            elif student.batch_index != index:
                violations.append(
                    f"Batch {index} ({batch.name}): member {key} points at batch {student.batch_index}"
                )

    for student in store.list_students():
        if student.batch_index is None:
            continue
        batch = store.batch_for(student)
        if batch is None:
            violations.append(f"Student {student.key}: batch {student.batch_index} does not exist")
        elif student.key not in batch.members:
            violations.append(
                f"Student {student.key}: not listed in batch {student.batch_index} ({batch.name})"
            )

    return violations
