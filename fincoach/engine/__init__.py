"""Pure computation over finance snapshots.

No I/O happens in this package. Callers load a full snapshot first and
pass ``now`` explicitly when results must be reproducible.
"""

from fincoach.engine.insights import filter_dismissed, generate_insights
from fincoach.engine.scoring import calculate_financial_health

__all__ = [
    "calculate_financial_health",
    "filter_dismissed",
    "generate_insights",
]
