"""Console entry point: ``carewatch`` or ``python -m carewatch.core.server.main``."""

from __future__ import annotations

import logging
from ipaddress import ip_address
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from carewatch.core.config.settings import Settings, get_settings
from carewatch.core.server.app import create_app

logger = logging.getLogger(__name__)


def _is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def _preflight(settings: Settings) -> None:
    """Reject configurations that would only fail on the first request."""
    if not _is_loopback_host(settings.carewatch_host) and not settings.carewatch_allow_insecure_bind:
        raise RuntimeError(
            f"Refusing to bind CareWatch to {settings.carewatch_host}: the tools have no "
            "auth layer. Set CAREWATCH_ALLOW_INSECURE_BIND=true to override (unsafe)."
        )
    try:
        ZoneInfo(settings.day_boundary_tz)
    except ZoneInfoNotFoundError as exc:
        raise RuntimeError(
            f"DAY_BOUNDARY_TZ={settings.day_boundary_tz!r} is not a known IANA timezone"
        ) from exc


def run() -> None:
    """Serve the CareWatch tools over Streamable HTTP."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.carewatch_log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    _preflight(settings)

    mcp = create_app()
    logger.info(
        "CareWatch listening on %s:%d (provider=%s, day boundary=%s)",
        settings.carewatch_host,
        settings.carewatch_port,
        settings.llm_provider,
        settings.day_boundary_tz,
    )
    mcp.run(
        transport="streamable-http",
        host=settings.carewatch_host,
        port=settings.carewatch_port,
    )


if __name__ == "__main__":
    run()
