"""
Ordered extraction strategies.

A field extractor is a tuple of strategies tried in priority order; the
first one returning a value wins and later ones are never run.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')

__all__ = ['Strategy', 'StrategyResult', 'run_strategies', 'select_max', 'select_last', 'TOTAL_SELECTORS']


@dataclass(frozen=True)
class Strategy(Generic[T]):
    """A named heuristic returning a value or None."""
    name: str
    func: Callable[..., Optional[T]]

    def __call__(self, *args: Any, **kwargs: Any) -> Optional[T]:
        return self.func(*args, **kwargs)


@dataclass(frozen=True)
class StrategyResult(Generic[T]):
    value: T
    strategy: str


def run_strategies(
    strategies: Sequence[Strategy[T]],
    *args: Any,
    **kwargs: Any
) -> Optional[StrategyResult[T]]:
    """
    Run strategies in order and stop at the first success.

    Args:
        strategies: Strategies in priority order
        *args, **kwargs: Passed to every strategy

    Returns:
        StrategyResult naming the winning strategy, or None if all failed

    Example:
        >>> result = run_strategies(MERCHANT_STRATEGIES, lines)
        >>> result.value, result.strategy
        ('Cafe Blue', 'header_line')
    """
    for strategy in strategies:
        value = strategy(*args, **kwargs)
        if value is not None:
            logger.debug("Strategy %s matched", strategy.name)
            return StrategyResult(value=value, strategy=strategy.name)
    return None


# Total selection: how one declared total is picked from candidate amounts.
# Neither rule is provably correct; both are noise-tolerance heuristics.

def select_max(candidates: Sequence[int]) -> Optional[int]:
    """Largest candidate; subtotals and OCR debris tend to be smaller."""
    return max(candidates) if candidates else None


def select_last(candidates: Sequence[int]) -> Optional[int]:
    """Candidate closest to the end of the document."""
    return candidates[-1] if candidates else None


TOTAL_SELECTORS: dict = {
    'max': select_max,
    'last': select_last,
}
