from batch_allocator import BatchAllocator
from batch_store import BatchStore
from models import Student
from reporting import batch_roster, student_record, summarize, total_capacity, validate_store


def test_summary_of_empty_store():
    assert summarize(BatchStore()) == {
        'total_students': 0,
        'total_batches': 0,
        'allocated_count': 0,
        'unallocated_count': 0,
        'total_capacity': 0
    }


def test_summary_after_fail_stop():
    store = BatchStore()
    for i in range(5):
        store.add_student(f"S{i}", f"Name {i}", 50)
    store.add_batch('B1', 2)
    store.add_batch('B2', 1)
    BatchAllocator().allocate(store, [s.key for s in store.list_students()])

    assert total_capacity(store) == 3
    assert summarize(store) == {
        'total_students': 5,
        'total_batches': 2,
        'allocated_count': 3,
        'unallocated_count': 2,
        'total_capacity': 3
    }


def test_summary_counts_loaded_indices_as_allocated():
    store = BatchStore()
    store.replace_students([Student('S1', 'A', 1, batch_index=2), Student('S2', 'B', 2)])

    summary = summarize(store)
    assert summary['allocated_count'] == 1
    assert summary['total_batches'] == 0


def test_batch_roster(populated_store):
    BatchAllocator().allocate(populated_store, ['S3', 'S1'])

    roster = batch_roster(populated_store)

    assert [b['filled'] for b in roster] == [1, 1, 0]
    assert roster[0] == {
        'index': 0,
        'name': 'B1',
        'capacity': 2,
        'filled': 1,
        'members': [{'key': 'S3', 'name': 'Charlie', 'score': 85}]
    }


def test_student_record(populated_store):
    BatchAllocator().allocate(populated_store, ['S1', 'S2'])

    assert student_record(populated_store, 'S2') == {
        'key': 'S2', 'name': 'bob', 'score': 70, 'batch_index': 1, 'batch_name': 'B2'
    }
    assert student_record(populated_store, 'S5')['batch_name'] is None
    assert student_record(populated_store, 'nobody') is None


def test_validate_store_reports_broken_links(populated_store):
    BatchAllocator().allocate(populated_store, ['S1', 'S2'])
    assert validate_store(populated_store) == []

    populated_store.lookup_student('S1').batch_index = 1
    populated_store.list_batches()[2].members.append('ghost')

    violations = validate_store(populated_store)
    assert "Batch 0 (B1): member S1 points at batch 1" in violations
    assert "Student S1: not listed in batch 1 (B2)" in violations
    assert "Batch 2 (B3): member ghost is not in the store" in violations


def test_validate_store_reports_stale_indices():
    store = BatchStore()
    store.replace_students([Student('S1', 'A', 1, batch_index=0)])

    assert validate_store(store) == ["Student S1: batch 0 does not exist"]
