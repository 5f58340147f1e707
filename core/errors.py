from __future__ import annotations


class RangeError(ValueError):
    """A value fell outside its parameter's bound under the reject policy."""

    def __init__(self, name: str, value: int, bound) -> None:
        super().__init__(f"{name} must be {bound.lo}-{bound.hi}, got {value}")
        self.name = name
        self.value = value
        self.bound = bound


class FormatError(ValueError):
    """Malformed device data: wrong length, bad checksum or out-of-range field."""

    def __init__(self, message: str, slot: int | None = None,
                 payload: bytes | None = None) -> None:
        if slot is not None:
            message = f"voice slot {slot}: {message}"
        super().__init__(message)
        self.slot = slot
        self.payload = payload


class ProgrammingError(RuntimeError):
    """A caller broke an API contract, e.g. a sub-bound wider than its bound."""
