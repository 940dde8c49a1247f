"""
kpi/base.py

Contract for ratio formulas evaluated over summed base measures.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, Mapping


class BaseKPIFormula(ABC):
    """
    A pure formula from pre-summed base measures to derived metrics.

    Subclasses declare the measures they read (``input_keys``) and the
    metrics they produce (``output_keys``). Callers go through
    :meth:`evaluate`, which rejects a result that is missing a declared
    metric or holds a non-finite number.
    """

    input_keys: tuple[str, ...] = ()
    output_keys: tuple[str, ...] = ()

    @abstractmethod
    def calculate(self, inputs: Mapping[str, Any]) -> dict[str, float]:
        """
        Compute the derived metrics for one group.

        Parameters
        ----------
        inputs:
            Base measures keyed by name; absent keys count as zero.

        Returns
        -------
        dict[str, float]
            One value per name in ``output_keys``.
        """

    def evaluate(self, inputs: Mapping[str, Any]) -> dict[str, float]:
        result = self.calculate(inputs)
        missing = [key for key in self.output_keys if key not in result]
        if missing:
            raise ValueError(
                f"{type(self).__name__} did not produce: {', '.join(missing)}."
            )
        invalid = [key for key, value in result.items() if not math.isfinite(value)]
        if invalid:
            raise ValueError(
                f"{type(self).__name__} produced non-finite values for: {', '.join(sorted(invalid))}."
            )
        return result
