"""Remote version lookups.

Queries the crates.io API for the newest published version of each tracked
crate and fetches raw files from the upstream repository. One request per
crate, no caching and no retry: any failure aborts the run.
"""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait

import requests

from .errors import RemoteFetchError
from .models import VersionSet

CRATES_IO_URL = "https://crates.io/api/v1/crates/{name}"
DEFAULT_USER_AGENT = "crate-sync (https://github.com/dprint/dprint-plugin-mago)"


def _get(url: str, user_agent: str) -> requests.Response:
    # crates.io rejects requests without a User-Agent
    try:
        response = requests.get(url, headers={"User-Agent": user_agent})
    except requests.RequestException as exc:
        raise RemoteFetchError(f"Request to {url} failed: {exc}") from exc
    if not response.ok:
        raise RemoteFetchError(
            f"Request to {url} failed: {response.status_code} {response.reason}"
        )
    return response


def fetch_latest_version(
    name: str,
    *,
    registry_url: str = CRATES_IO_URL,
    user_agent: str = DEFAULT_USER_AGENT,
) -> str:
    """Return the newest published version of a crate.

    Raises:
        RemoteFetchError: On a failed request, a non-JSON body, or a payload
            without `crate.newest_version`.
    """
    response = _get(registry_url.format(name=name), user_agent)
    try:
        data = response.json()
    except ValueError as exc:
        raise RemoteFetchError(f"Invalid JSON for {name} crate info: {exc}") from exc

    crate = data.get("crate") if isinstance(data, dict) else None
    latest = crate.get("newest_version") if isinstance(crate, dict) else None
    if not latest:
        raise RemoteFetchError(f"Could not find latest version of {name} on the registry.")
    print(f"  Latest {name} version on the registry: {latest}")
    return str(latest)


def fetch_latest_versions(
    names: Sequence[str],
    *,
    registry_url: str = CRATES_IO_URL,
    user_agent: str = DEFAULT_USER_AGENT,
) -> VersionSet:
    """Fetch the newest version of every crate in parallel.

    Waits for all lookups to finish. If any lookup fails, the first failure is
    raised and lookups that have not started yet are cancelled.
    """
    if not names:
        return {}

    executor = ThreadPoolExecutor(max_workers=len(names), thread_name_prefix="crate-sync")
    try:
        futures = {
            name: executor.submit(
                fetch_latest_version,
                name,
                registry_url=registry_url,
                user_agent=user_agent,
            )
            for name in names
        }
        done, _ = wait(futures.values(), return_when=FIRST_EXCEPTION)
        for future in done:
            exc = future.exception()
            if exc is not None:
                raise exc
        return {name: future.result() for name, future in futures.items()}
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


def fetch_text(url: str, *, user_agent: str = DEFAULT_USER_AGENT) -> str:
    """Fetch a raw file, e.g. an upstream manifest at a release tag."""
    return _get(url, user_agent).text
