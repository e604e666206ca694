"""
Raw-response interpreters.

- value_formatter: measurement transform rules
- alarm_evaluator: alarm flag activation
"""

from excitermon.parsers.alarm_evaluator import build_status, evaluate_alarm, is_active
from excitermon.parsers.value_formatter import apply_rule, format_scaled, format_value

__all__ = [
    # Measurements
    "format_value",
    "format_scaled",
    "apply_rule",
    # Alarms
    "evaluate_alarm",
    "build_status",
    "is_active",
]
