DAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
DAY_TO_INDEX = {label: idx for idx, label in enumerate(DAY_LABELS)}

DEFAULT_HABIT_COLOR = "#60a5fa"
DEFAULT_FREQUENCY = [1, 2, 3, 4, 5]
REMAINING_COLOR = "#1D2330"

PERIOD_OPTIONS = {
    "week": "Last 7 days",
    "month": "Last 30 days",
    "year": "Last 365 days",
}
DEFAULT_PERIOD = "month"

TRACKER_DAYS = 15
STATS_COLUMNS = 3
