from __future__ import annotations

from fastapi import HTTPException


# ──────────────────────────────────────────────────────────────
# Upstream fetch failures
# ──────────────────────────────────────────────────────────────
# An empty upstream result is not an error: fetchers return [].

class FetchError(Exception):
    """Base for failures talking to an upstream data source."""


class NetworkFailure(FetchError):
    """Unreachable host, timeout or non-2xx HTTP status."""


class DecodeFailure(FetchError):
    """Payload arrived but did not match the expected schema."""


# ──────────────────────────────────────────────────────────────
# API errors
# ──────────────────────────────────────────────────────────────

def bad_request(code: str, message: str):
    raise HTTPException(status_code=400, detail={"code": code, "message": message})


def not_found(code: str, message: str):
    raise HTTPException(status_code=404, detail={"code": code, "message": message})
