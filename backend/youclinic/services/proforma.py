"""
Proforma invoice computation.
"""

from typing import Iterable, Mapping, Union

Number = Union[int, float]


def compute_totals(items: Iterable[Mapping], deposit: Number = 0) -> tuple[float, float]:
    """
    Return ``(total, remaining)`` for a list of ``{"description", "amount"}`` items.

    ``total`` is the sum of item amounts (0 for no items); ``remaining`` is
    ``total - deposit`` and may be negative when the deposit exceeds the total.
    """
    total = float(sum(float(item["amount"]) for item in items))
    return total, total - float(deposit or 0)
