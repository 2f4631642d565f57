# appstore_charts/net.py
from typing import Optional

import requests

from appstore_charts import config


def get_json(url: str, timeout: Optional[float] = None):
    """GET a URL and return the decoded JSON body.

    Raises requests.RequestException on network/HTTP errors and ValueError on
    an invalid body; callers decide how to degrade.
    """
    r = requests.get(
        url,
        timeout=timeout or config.HTTP_TIMEOUT,
        headers={"Accept": "application/json", "User-Agent": config.USER_AGENT},
    )
    r.raise_for_status()
    return r.json()
