from dataclasses import dataclass, field
from typing import Any, Dict

from dashboard.constants import DEFAULT_PERIOD, PERIOD_OPTIONS


@dataclass
class DashboardContext:
    period: str = DEFAULT_PERIOD
    extras: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.period not in PERIOD_OPTIONS:
            self.period = DEFAULT_PERIOD

    def get(self, key, default=None):
        if key == "period":
            return self.period
        return self.extras.get(key, default)
