import logging
import random
from typing import List, Optional, Sequence

from batch_store import BatchStore
from errors import InvalidInputError
from ordering import DEFAULT_STRATEGY, order_students


class BatchAllocator:
    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def allocate(self, store: BatchStore, order: Sequence[str]) -> List[str]:
        """
        Place students into batches round-robin, respecting capacities.

        Every run starts from scratch: all previous assignments are cleared
        before placement. The cursor starts at the first batch and, after each
        placement, moves to the batch following the one just filled. When no
        batch has room left the run stops and the remaining keys stay unplaced.

        Returns:
            List of keys from the order that were not placed
        """
        batches = store.list_batches()
        if not batches:
            raise InvalidInputError("No batches defined. Add batches first.")

        store.reset_allocations()

        cursor = 0
        placed = set()
        for position, key in enumerate(order):
            if store.lookup_student(key) is None:
                self.logger.warning(f"Skipping unknown student {key}")
                continue
            if key in placed:
                self.logger.warning(f"Skipping repeated student {key}")
                continue

            batch_index = self._find_open_batch(batches, cursor)
            if batch_index is None:
                unplaced = [k for k in order[position:]
                            if k not in placed and store.lookup_student(k) is not None]
                # Keep first occurrence of each remaining key
                unplaced = list(dict.fromkeys(unplaced))
                self.logger.warning(
                    f"All batches are full; {len(unplaced)} students remain unallocated"
                )
                return unplaced

            store.place(key, batch_index)
            placed.add(key)
            cursor = (batch_index + 1) % len(batches)

        self.logger.info(f"Allocated {len(placed)} students across {len(batches)} batches")
        return []

    def _find_open_batch(self, batches, cursor: int) -> Optional[int]:
        """
        Scan every batch once, circularly from the cursor, for the first one
        with room.
        """
        count = len(batches)
        for step in range(count):
            index = (cursor + step) % count
            if batches[index].has_room:
                return index
        return None


def allocate_batches(store: BatchStore, strategy: str = DEFAULT_STRATEGY,
                     rng: Optional[random.Random] = None,
                     allocator: Optional[BatchAllocator] = None) -> List[str]:
    """
    Order the store's students with the named strategy and allocate them.
    """
    if allocator is None:
        allocator = BatchAllocator()
    if store.batch_count == 0:
        raise InvalidInputError("No batches defined. Add batches first.")
    if store.student_count == 0:
        allocator.logger.info("No students available to allocate")

    order = order_students(store.list_students(), strategy, rng=rng)
    return allocator.allocate(store, order)
