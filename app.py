import os

import streamlit as st

from dashboard.constants import DEFAULT_PERIOD
from dashboard.context import DashboardContext
from dashboard.data import api_client
from dashboard.logging_config import configure_logging
from dashboard.tabs.habits_tab import render_habits_tab

ENV_FALLBACK_KEYS = {
    ("app", "API_BASE_URL"): "API_BASE_URL",
    ("app", "DASHBOARD_LOG_LEVEL"): "DASHBOARD_LOG_LEVEL",
}


def get_secret(path, default=None):
    env_key = ENV_FALLBACK_KEYS.get(tuple(path))
    if env_key:
        env_value = os.getenv(env_key)
        if env_value:
            return env_value
    current = st.secrets
    for key in path:
        try:
            if key not in current:
                return default
            current = current[key]
        except Exception:
            return default
    return current


configure_logging(get_secret(("app", "DASHBOARD_LOG_LEVEL")))
api_client.configure(get_secret)

st.set_page_config(page_title="Habit Board", layout="wide")

context = DashboardContext(period=st.session_state.get("habits.period", DEFAULT_PERIOD))
render_habits_tab(context)
