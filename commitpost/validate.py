"""Credential validation for the configured backend."""

import re
from dataclasses import dataclass, field
from typing import Optional

from commitpost.config import Backend, Settings
from commitpost.errors import AuthFailed
from commitpost.publishers import BasePublisher

HANDLE_VALID = "valid"
HANDLE_INVALID = "invalid"
HANDLE_UNKNOWN = "unknown"

_DID_RE = re.compile(r"^did:[a-z]+:[a-zA-Z0-9._-]+$")
_HANDLE_RE = re.compile(r"^[a-zA-Z0-9.-]+$")


def validate_handle_format(handle: str) -> str:
    """Classify a Bluesky identifier as a DID or domain handle."""
    if not handle:
        return HANDLE_UNKNOWN
    if handle.startswith("did:"):
        return HANDLE_VALID if _DID_RE.match(handle) else HANDLE_INVALID
    if "." in handle and _HANDLE_RE.match(handle):
        return HANDLE_VALID
    return HANDLE_INVALID


@dataclass
class ValidationReport:
    """Result of checking credentials, one (label, ok, detail) per check."""

    backend: Backend
    checks: list[tuple[str, bool, str]] = field(default_factory=list)
    auth_ok: Optional[bool] = None
    auth_error: str = ""

    @property
    def ok(self) -> bool:
        return all(passed for _, passed, _ in self.checks) and self.auth_ok is not False


def check_credentials(settings: Settings) -> ValidationReport:
    """Report which credentials are present and well-formed."""
    report = ValidationReport(backend=settings.backend)

    if settings.backend == Backend.BLUESKY:
        handle = settings.bluesky_identifier
        report.checks.append(("BSKY_HANDLE", bool(handle), "set" if handle else "NOT SET"))
        if handle:
            handle_format = validate_handle_format(handle)
            report.checks.append(
                ("Handle format", handle_format == HANDLE_VALID, f"{handle_format} ({handle})")
            )
        has_password = bool(settings.bluesky_password)
        report.checks.append(("BSKY_APP_PASSWORD", has_password, "set" if has_password else "NOT SET"))
    else:
        for label, value in (
            ("X_API_KEY", settings.twitter_api_key),
            ("X_API_SECRET", settings.twitter_api_secret),
            ("X_ACCESS_TOKEN", settings.twitter_access_token),
            ("X_ACCESS_TOKEN_SECRET", settings.twitter_access_token_secret),
        ):
            report.checks.append((label, bool(value), "set" if value else "NOT SET"))

    return report


async def check_authentication(publisher: BasePublisher, report: ValidationReport) -> ValidationReport:
    """Authenticate against the backend and store the result in the report."""
    try:
        await publisher.authenticate()
        report.auth_ok = True
    except AuthFailed as e:
        report.auth_ok = False
        report.auth_error = str(e)
    return report
