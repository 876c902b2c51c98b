class BatchAllocationError(Exception):
    """Base class for every recoverable error raised by the allocation core."""


class InvalidInputError(BatchAllocationError):
    """Empty or out-of-range field, or a configured limit reached."""


class DuplicateKeyError(BatchAllocationError):
    def __init__(self, key: str):
        super().__init__(f"A student with key '{key}' already exists")
        self.key = key


class NotFoundError(BatchAllocationError):
    def __init__(self, key: str):
        super().__init__(f"Student '{key}' not found")
        self.key = key


class StorageError(BatchAllocationError):
    """A file could not be opened, read or written."""

    def __init__(self, path, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path


class ResourceExhaustedError(BatchAllocationError):
    """Memory ran out while growing the student or batch collections."""
