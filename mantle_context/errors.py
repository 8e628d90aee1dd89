from __future__ import annotations

from typing import Optional


class OnchainContextError(Exception):
    """Base class for every failure raised by the aggregation pipeline."""


class UpstreamHTTPError(OnchainContextError):
    """Upstream feed answered with a non-2xx status or could not be reached."""

    def __init__(self, url: str, status_code: Optional[int] = None, detail: str | None = None):
        self.url = url
        self.status_code = status_code
        if status_code is None:
            msg = f"Upstream request to {url} failed: {detail or 'transport error'}"
        else:
            msg = f"HTTP error! status: {status_code} ({url})"
        super().__init__(msg)


class UpstreamShapeError(OnchainContextError):
    """Upstream body is not JSON or lacks the fields a record needs."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Unexpected response shape from {url}: {reason}")


class DerivationError(OnchainContextError):
    """A derived value was requested from input that cannot produce one."""


class UnknownToolError(OnchainContextError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class InvocationTimeoutError(OnchainContextError):
    def __init__(self, name: str, deadline: float):
        self.name = name
        self.deadline = deadline
        super().__init__(f"Tool {name} exceeded its {deadline:g}s deadline")
