import logging
import os
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

_SECRET_GETTER = None


def _build_session():
    session = requests.Session()
    retry = Retry(
        total=2,
        backoff_factor=0.5,
        status_forcelist=(502, 503, 504),
        allowed_methods=("GET", "POST", "PUT"),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=4, pool_maxsize=4)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


_SESSION = _build_session()


def configure(secret_getter):
    global _SECRET_GETTER
    _SECRET_GETTER = secret_getter


def _get_secret(path, default=None):
    if _SECRET_GETTER is None:
        return default
    return _SECRET_GETTER(path, default)


def api_base_url():
    return (
        _get_secret(("app", "API_BASE_URL"))
        or _get_secret(("API_BASE_URL",))
        or os.getenv("API_BASE_URL")
        or ""
    )


def is_enabled():
    return bool(api_base_url())


def request(method: str, path: str, params: dict | None = None, json: dict | None = None, timeout: int = 10) -> Any:
    base = api_base_url().rstrip("/")
    if not base:
        raise RuntimeError("API_BASE_URL not configured")
    url = f"{base}{path}"
    response = _SESSION.request(method, url, params=params, json=json, timeout=timeout)
    if not response.ok:
        try:
            detail = response.json().get("detail")
        except Exception:
            detail = response.text
        logger.warning("%s %s failed with %s", method, path, response.status_code)
        raise RuntimeError(f"API error {response.status_code} {response.reason}: {detail}")
    if response.status_code == 204:
        return None
    return response.json()
