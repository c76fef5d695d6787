"""Append-only, numbered line storage for the transaction builder."""

from collections.abc import Iterator

from avatax.client.models import LineItemModel
from avatax.core.exceptions import BuilderMisuseError


class LineCollection:
    """Ordered transaction lines with monotonically increasing numbers.

    Line numbers start at 1, follow append order and are never reused. The
    collection offers no way to remove or reorder lines, and a line's number
    is frozen on the model, so "the most recent line" is always the one with
    the highest number.
    """

    def __init__(self) -> None:
        self._lines: list[LineItemModel] = []
        self._next_number = 1
        self._current_index: int | None = None

    def append(
        self,
        amount: float,
        quantity: float,
        *,
        tax_code: str | None = None,
        item_code: str | None = None,
        exemption_code: str | None = None,
    ) -> LineItemModel:
        """Add a line with the next number and make it the current line."""
        line = LineItemModel(
            number=self._next_number,
            amount=amount,
            quantity=quantity,
            tax_code=tax_code,
            item_code=item_code,
            exemption_code=exemption_code,
        )
        self._lines.append(line)
        self._current_index = len(self._lines) - 1
        self._next_number += 1
        return line

    def most_recent(self, operation: str) -> LineItemModel:
        """Return the most recently appended line.

        Args:
            operation: Name of the calling operation, for the error message.

        Raises:
            BuilderMisuseError: If no line has been appended yet.
        """
        if self._current_index is None:
            raise BuilderMisuseError(operation)
        return self._lines[self._current_index]

    def snapshot(self) -> list[LineItemModel]:
        """Deep copies of all lines, in append order."""
        return [line.model_copy(deep=True) for line in self._lines]

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[LineItemModel]:
        return iter(self.snapshot())
