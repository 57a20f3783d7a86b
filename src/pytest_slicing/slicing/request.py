"""Coordinates of one executor in the batch x fork grid."""

from __future__ import annotations

from dataclasses import dataclass


class InvalidPartitionRequest(ValueError):
    """Raised for non-positive counts or out-of-range batch/fork numbers.

    This is fatal: a run with an invalid request must stop before any
    scenario executes.
    """


@dataclass(frozen=True)
class PartitionRequest:
    """Which cell of the execution grid this process runs.

    All numbers are 1-indexed.

    Attributes:
        batch_number: Selected batch, ``1 <= batch_number <= batch_count``.
        batch_count: Number of coarse batches.
        fork_number: Selected fork, ``1 <= fork_number <= fork_count``.
        fork_count: Number of parallel forks per batch.
        tag_expressions: Tag expressions every scenario must satisfy.

    Example:
        >>> request = PartitionRequest(batch_number=2, batch_count=3)
        >>> request.is_single_cell
        False
    """

    batch_number: int = 1
    batch_count: int = 1
    fork_number: int = 1
    fork_count: int = 1
    tag_expressions: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate the grid coordinates.

        Raises:
            InvalidPartitionRequest: If a count is not positive or a number is
                outside its count.
        """
        if self.batch_count <= 0:
            msg = f'batch count must be positive, got {self.batch_count}'
            raise InvalidPartitionRequest(msg)
        if self.fork_count <= 0:
            msg = f'fork count must be positive, got {self.fork_count}'
            raise InvalidPartitionRequest(msg)
        if not 1 <= self.batch_number <= self.batch_count:
            msg = f'batch number must be between 1 and {self.batch_count}, got {self.batch_number}'
            raise InvalidPartitionRequest(msg)
        if not 1 <= self.fork_number <= self.fork_count:
            msg = f'fork number must be between 1 and {self.fork_count}, got {self.fork_number}'
            raise InvalidPartitionRequest(msg)
        object.__setattr__(self, 'tag_expressions', tuple(self.tag_expressions))

    @property
    def is_single_cell(self) -> bool:
        """Return True when the grid has exactly one cell."""
        return self.batch_count == 1 and self.fork_count == 1

    @property
    def cell(self) -> tuple[int, int]:
        """Return (batch_number, fork_number)."""
        return (self.batch_number, self.fork_number)

    def __str__(self) -> str:
        return f'batch {self.batch_number} of {self.batch_count}, fork {self.fork_number} of {self.fork_count}'
