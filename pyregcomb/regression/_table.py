"""
Bounded table of the best models seen so far.

Slots fill in arrival order until the table is full. After that a new
model replaces the slot with the largest standard error, and only when
its own standard error is strictly smaller. The worst slot is found by a
linear scan; capacities are small (tens of models).
"""

from __future__ import annotations

import logging

import numpy as np

from pyregcomb.core.compute.linalg import sort_indices
from pyregcomb.regression._common import Model

logger = logging.getLogger(__name__)


class ModelTable:
    """Fixed-capacity model store ranked by standard error."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._slots: list[Model] = []

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self):
        return iter(self._slots)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def full(self) -> bool:
        return len(self._slots) >= self._capacity

    def worst(self) -> tuple[int, float]:
        """Slot index and standard error of the worst stored model."""
        worst_index = -1
        worst_se = -1.0
        for i, model in enumerate(self._slots):
            if model.standard_error > worst_se:
                worst_se = model.standard_error
                worst_index = i
        return worst_index, worst_se

    def offer(self, model: Model) -> bool:
        """
        Try to admit a model.

        Returns:
            True if the model was stored (appended or replaced a slot)
        """
        if not self.full:
            self._slots.append(model)
            logger.debug(
                "stored %s in slot %d (se=%.6g)",
                model.variables, len(self._slots) - 1, model.standard_error,
            )
            return True

        index, worst_se = self.worst()
        if model.standard_error < worst_se:
            logger.debug(
                "%s replaces %s in slot %d (se %.6g < %.6g)",
                model.variables, self._slots[index].variables, index,
                model.standard_error, worst_se,
            )
            self._slots[index] = model
            return True
        return False

    def snapshot(self) -> tuple[frozenset[int], ...]:
        """Variable sets of the stored models, in slot order."""
        return tuple(frozenset(model.variables) for model in self._slots)

    def has_size(self, size: int) -> bool:
        """True if any stored model has exactly `size` variables."""
        return any(model.n_variables == size for model in self._slots)

    def ranked(self) -> tuple[Model, ...]:
        """Stored models ordered by ascending standard error."""
        if not self._slots:
            return ()
        errors = np.array([model.standard_error for model in self._slots])
        return tuple(self._slots[i] for i in sort_indices(errors))
