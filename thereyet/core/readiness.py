"""외부 공급자 준비성(readiness) 체크 유틸."""

from __future__ import annotations

import asyncio
import socket
from urllib.parse import urlparse

from thereyet.core.config import Settings, get_settings
from thereyet.core.timeout_policy import TimeoutPolicy, get_timeout_policy

ReadinessCheck = dict[str, str | bool]


def _ok(detail: str, *, required: bool = True) -> ReadinessCheck:
    return {"status": "ok", "ok": True, "required": required, "detail": detail}


def _fail(detail: str, *, required: bool = True) -> ReadinessCheck:
    return {"status": "fail", "ok": False, "required": required, "detail": detail}


def _resolve_host_port(base_url: str) -> tuple[str, int] | None:
    parsed = urlparse(base_url)
    host = parsed.hostname
    if not host:
        return None

    default_port = 443 if parsed.scheme.lower() == "https" else 80
    return host, int(parsed.port or default_port)


async def _check_tcp_connectivity(host: str, port: int, timeout_seconds: int, label: str) -> ReadinessCheck:
    def _connect() -> None:
        with socket.create_connection((host, port), timeout=timeout_seconds):
            return None

    try:
        await asyncio.to_thread(_connect)
        return _ok(f"{label} reachable ({host}:{port})")
    except OSError as exc:
        return _fail(f"{label} unreachable ({host}:{port}): {exc}")


async def _check_provider(base_url: str, label: str, timeout_policy: TimeoutPolicy) -> ReadinessCheck:
    host_port = _resolve_host_port(base_url)
    if host_port is None:
        return _fail(f"{label} base URL is not a valid URL: {base_url!r}")

    host, port = host_port
    return await _check_tcp_connectivity(
        host=host,
        port=port,
        timeout_seconds=timeout_policy.external_api_timeout_seconds,
        label=label,
    )


async def collect_readiness_status(settings: Settings | None = None) -> dict[str, object]:
    """지오코딩/경로 공급자 연결 가능 여부를 점검합니다."""
    resolved = settings or get_settings()
    timeout_policy = get_timeout_policy(resolved)

    geocoding_check, routing_check = await asyncio.gather(
        _check_provider(resolved.NOMINATIM_BASE_URL, "Geocoding API", timeout_policy),
        _check_provider(resolved.OSRM_BASE_URL, "Routing API", timeout_policy),
    )

    checks: dict[str, ReadinessCheck] = {
        "geocoding": geocoding_check,
        "routing": routing_check,
    }
    required_checks_ok = all(bool(check["ok"]) for check in checks.values() if bool(check.get("required", True)))

    return {
        "status": "ready" if required_checks_ok else "not_ready",
        "checks": checks,
    }
