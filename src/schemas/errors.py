"""Validation error schemas."""

from collections.abc import Iterable, Iterator

from pydantic import BaseModel, ConfigDict


class FieldError(BaseModel):
    """A single validation failure attached to a field."""

    model_config = ConfigDict(frozen=True)

    field: str
    message: str


class PresenceError(FieldError):
    """Required value is missing or blank."""

    message: str = "can't be blank"


class FormatError(FieldError):
    """Value does not match the expected pattern."""

    message: str = "is invalid"


class UniquenessError(FieldError):
    """Value is already used by another record."""

    message: str = "has already been taken"


class LengthError(FieldError):
    """Value is too short or too long."""

    @classmethod
    def too_short(cls, field: str, minimum: int) -> "LengthError":
        return cls(field=field, message=f"is too short (minimum is {minimum} characters)")

    @classmethod
    def too_long(cls, field: str, maximum: int, unit: str = "characters") -> "LengthError":
        return cls(field=field, message=f"is too long (maximum is {maximum} {unit})")


class Errors:
    """Ordered collection of field errors for one record.

    An empty collection is falsy, so ``if errors:`` reads as "the save failed".
    """

    def __init__(self, items: Iterable[FieldError] = ()):
        self._items: list[FieldError] = list(items)

    def add(self, error: FieldError) -> None:
        self._items.append(error)

    def extend(self, errors: Iterable[FieldError]) -> None:
        self._items.extend(errors)

    def __getitem__(self, field: str) -> list[str]:
        return [error.message for error in self._items if error.field == field]

    def __contains__(self, field: object) -> bool:
        return any(error.field == field for error in self._items)

    def __iter__(self) -> Iterator[FieldError]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"Errors({self.as_list()!r})"

    def of_type(self, field: str, error_type: type[FieldError]) -> list[FieldError]:
        """Errors on ``field`` that are instances of ``error_type``."""
        return [e for e in self._items if e.field == field and isinstance(e, error_type)]

    def full_messages(self) -> list[str]:
        messages = []
        for error in self._items:
            if error.field == "base":
                messages.append(error.message)
            else:
                label = error.field.replace("_", " ").capitalize()
                messages.append(f"{label} {error.message}")
        return messages

    def as_list(self) -> list[dict[str, str]]:
        """Field/message pairs for handing to callers."""
        return [{"field": error.field, "message": error.message} for error in self._items]

    @property
    def is_valid(self) -> bool:
        return not self._items


class RecordInvalid(Exception):
    """Raised by callers that treat a failed save as exceptional."""

    def __init__(self, errors: Errors):
        self.errors = errors
        super().__init__("Validation failed: " + ", ".join(errors.full_messages()))


def raise_if_invalid(errors: Errors) -> None:
    """Raise RecordInvalid when ``errors`` is not empty."""
    if errors:
        raise RecordInvalid(errors)
