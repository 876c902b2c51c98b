import pytest

from batch_store import BatchStore


@pytest.fixture
def store():
    return BatchStore()


@pytest.fixture
def populated_store():
    store = BatchStore()
    store.add_student('S1', 'Alice', 90)
    store.add_student('S2', 'bob', 70)
    store.add_student('S3', 'Charlie', 85)
    store.add_student('S4', 'Alice', 70)
    store.add_student('S5', 'Eve', 55)
    store.add_batch('B1', 2)
    store.add_batch('B2', 2)
    store.add_batch('B3', 2)
    return store
