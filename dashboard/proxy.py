import logging

import requests


logger = logging.getLogger(__name__)


def _reject_constant(name):
    raise ValueError(f"non-standard JSON constant {name}")


class DatasetFetchError(Exception):
    """The upstream dataset could not be fetched or decoded."""


def fetch_dataset(url: str, *, timeout: float | None = None):
    """Fetch the transaction dataset from the upstream URL.

    Returns the decoded JSON body unmodified. Every failure (network error,
    non-2xx status, malformed JSON, NaN or Infinity literals) surfaces as
    DatasetFetchError.
    """
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        return response.json(parse_constant=_reject_constant)
    except (requests.RequestException, ValueError) as exc:
        logger.error("Upstream dataset fetch failed url=%s error=%s", url, exc)
        raise DatasetFetchError(str(exc) or exc.__class__.__name__) from exc
