"""
Automated settlement of weekly bets.

Example:
    >>> from bozo_bets.processing import run_automated_processing
    >>>
    >>> outcome = run_automated_processing(db, now=datetime(2025, 9, 16, 2))
    >>> outcome["type"]
    'tuesday'
"""

from .automated import (
    BetProcessingResult,
    get_current_processing_week,
    process_daily_bet_results,
    process_tuesday_bozo_annotation,
    run_automated_processing,
    settle_previous_day,
    should_process_daily_bet_results,
    should_process_tuesday_bozo_annotation,
)
from .results import (
    BetResolution,
    FanduelPropResolver,
    ResultResolver,
    update_prop_results,
)

__all__ = [
    "BetProcessingResult",
    "BetResolution",
    "FanduelPropResolver",
    "ResultResolver",
    "get_current_processing_week",
    "process_daily_bet_results",
    "process_tuesday_bozo_annotation",
    "run_automated_processing",
    "settle_previous_day",
    "should_process_daily_bet_results",
    "should_process_tuesday_bozo_annotation",
    "update_prop_results",
]
