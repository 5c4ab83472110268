"""HTTP helper utilities for tests."""

from __future__ import annotations


def json_headers(auth_token: str | None = None) -> dict[str, str]:
    """Return standard JSON headers.

    Parameters
    ----------
    auth_token:
        Optional bearer token to include.

    Returns
    -------
    dict[str, str]
        HTTP headers dictionary.
    """

    headers = {"Content-Type": "application/json", "Accept": "application/json"}
    if auth_token:
        headers["Authorization"] = f"Bearer {auth_token}"
    return headers


def assert_json_keys(data: dict, required: set[str]) -> None:
    """Ensure that all required keys are present in ``data``.

    Raises
    ------
    AssertionError
        If any required key is missing.
    """

    missing = required - data.keys()
    assert not missing, f"Missing keys: {', '.join(sorted(missing))}"


def assert_error(resp, status: int, code: str) -> dict:
    """Assert an error envelope and return its JSON body."""

    assert resp.status_code == status, resp.get_data(as_text=True)
    body = resp.get_json()
    assert_json_keys(body, {"code", "message"})
    assert body["code"] == code
    return body
