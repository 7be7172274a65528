"""Error types reported by the metrics registry."""


class CassiniError(Exception):
    """Base class for all exporter errors."""


class TypeMismatchError(CassiniError):
    """Stored entry is not the expected metric representation."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"{message} (key={key})")


class CounterOverwriteError(TypeMismatchError):
    """Attempt to replace a counter entry with set()."""

    def __init__(self, key: str):
        super().__init__(key, "Set error: refusing to overwrite counter")


class CounterDecreaseError(TypeMismatchError):
    """Attempt to lower a counter with count()."""

    def __init__(self, key: str, delta: float):
        self.delta = delta
        super().__init__(key, f"Count error: counter can not decrease by {delta}")


class MissingDescriptorError(CassiniError):
    """Key has no registered descriptor."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Collect error: can not find desc({key})")


class LabelMismatchError(CassiniError):
    """Label value count differs from the descriptor's label names."""

    def __init__(self, key: str, expected: int, got: int):
        self.key = key
        self.expected = expected
        self.got = got
        super().__init__(
            f"Collect error: desc({key}) expects {expected} label values, got {got}"
        )
