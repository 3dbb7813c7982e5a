"""Post-deploy smoke checks executed from the app container."""

from __future__ import annotations

import argparse
import json
import os
import urllib.error
import urllib.request

DEFAULT_BASE_URL = "http://localhost:8000"
API_PREFIX = "/api/v1"


def request(
    base_url: str,
    path: str,
    *,
    method: str = "GET",
    body: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
    expected: int = 200,
) -> bytes:
    payload = None
    req_headers = {"Accept": "application/json"}
    if headers:
        req_headers.update(headers)
    if body is not None:
        payload = json.dumps(body).encode("utf-8")
        req_headers["Content-Type"] = "application/json"

    request_obj = urllib.request.Request(
        f"{base_url}{path}",
        data=payload,
        method=method,
        headers=req_headers,
    )
    try:
        with urllib.request.urlopen(request_obj, timeout=30) as response:
            content = response.read()
            status = response.getcode()
    except urllib.error.HTTPError as exc:  # pragma: no cover - runtime smoke script
        if exc.code == expected:
            return exc.read()
        body_text = exc.read().decode("utf-8", errors="ignore")
        raise RuntimeError(f"{method} {path} -> {exc.code}: {body_text}") from exc

    if status != expected:
        raise RuntimeError(f"{method} {path} -> {status}, expected {expected}")
    return content


def _check_coordinator_session(base_url: str, username: str, password: str) -> None:
    login_payload = json.loads(
        request(
            base_url,
            f"{API_PREFIX}/identity/auth/login",
            method="POST",
            body={"username": username, "password": password},
        ).decode("utf-8")
    )
    auth_headers = {"Authorization": f"Bearer {login_payload['access_token']}"}
    request(base_url, f"{API_PREFIX}/identity/me", headers=auth_headers)
    request(base_url, f"{API_PREFIX}/units", headers=auth_headers)
    request(base_url, f"{API_PREFIX}/appointments?limit=1", headers=auth_headers)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Smoke-check a running Agenda deployment.")
    parser.add_argument("--base-url", default=os.getenv("SMOKE_BASE_URL", DEFAULT_BASE_URL))
    parser.add_argument("--username", default=os.getenv("SMOKE_COORDINATOR_USERNAME", "coordenacao"))
    parser.add_argument(
        "--password",
        default=os.getenv("SMOKE_COORDINATOR_PASSWORD"),
        help="Coordinator password; the authenticated checks are skipped when omitted.",
    )
    return parser


def main() -> None:
    args = _build_parser().parse_args()
    base_url = args.base_url.rstrip("/")

    for endpoint in ["/health", "/ready", "/docs", "/metrics"]:
        request(base_url, endpoint, expected=200)

    # coordinator endpoints must refuse anonymous callers
    request(base_url, f"{API_PREFIX}/appointments", expected=401)
    request(base_url, f"{API_PREFIX}/appointments/export.csv", expected=401)

    if args.password:
        _check_coordinator_session(base_url, args.username, args.password)
    else:
        print("Skipping coordinator checks: no password given.")

    print("Smoke checks passed.")


if __name__ == "__main__":
    main()
