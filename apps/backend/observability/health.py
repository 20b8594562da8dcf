"""
Health check utilities for dependency monitoring.

Provides checks for:
- Provider registry (loaded and non-empty)
- System resources (memory, disk)
"""

from typing import Dict, Any, Optional
from datetime import datetime, timezone

import psutil

from .logging import get_logger

logger = get_logger(__name__)


class HealthCheckResult:
    """Result of a health check."""

    def __init__(self, name: str, status: str, details: Optional[Dict[str, Any]] = None, error: Optional[str] = None):
        self.name = name
        self.status = status  # "ok", "degraded", "error"
        self.details = details or {}
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "status": self.status,
            "details": self.details,
        }
        if self.error:
            result["error"] = self.error
        return result

    @property
    def is_healthy(self) -> bool:
        return self.status == "ok"


def check_provider_registry(registry) -> HealthCheckResult:
    """
    Report which providers are configured.

    Providers are not pinged; a live call per health probe would hit every
    upstream on each check.
    """
    if registry is None:
        return HealthCheckResult(
            name="provider_registry",
            status="error",
            error="Provider registry not loaded",
        )

    if registry.is_empty:
        return HealthCheckResult(
            name="provider_registry",
            status="error",
            error="No providers configured",
        )

    return HealthCheckResult(
        name="provider_registry",
        status="ok",
        details={
            "configured_providers": registry.keys(),
            "count": len(registry),
        },
    )


def check_system_resources() -> HealthCheckResult:
    """
    Check system resources (memory, disk).

    Returns:
        HealthCheckResult with system resource status
    """
    try:
        memory = psutil.virtual_memory()
        disk = psutil.disk_usage("/")
    except OSError as e:
        logger.error("System resource check failed", exc_info=True)
        return HealthCheckResult(
            name="system_resources",
            status="error",
            error=str(e)[:200],
        )

    status = "ok"
    warnings = []

    if memory.percent > 95:
        status = "error"
        warnings.append(f"Critical memory usage: {memory.percent}%")
    elif memory.percent > 90:
        status = "degraded"
        warnings.append(f"High memory usage: {memory.percent}%")

    if disk.percent > 95:
        status = "error"
        warnings.append(f"Critical disk usage: {disk.percent}%")
    elif disk.percent > 85 and status == "ok":
        status = "degraded"
        warnings.append(f"High disk usage: {disk.percent}%")

    return HealthCheckResult(
        name="system_resources",
        status=status,
        details={
            "memory_percent": round(memory.percent, 1),
            "memory_available_mb": round(memory.available / (1024 * 1024), 1),
            "disk_percent": round(disk.percent, 1),
            "disk_free_gb": round(disk.free / (1024 * 1024 * 1024), 1),
            "warnings": warnings if warnings else None,
        },
    )


def run_health_checks(registry, include_system: bool = True) -> Dict[str, Any]:
    """
    Run all health checks and return aggregated results.

    Only the provider registry decides readiness; system resources can only
    degrade the reported status.
    """
    checks = {"provider_registry": check_provider_registry(registry)}

    if include_system:
        checks["system_resources"] = check_system_resources()

    ready = checks["provider_registry"].is_healthy
    statuses = [check.status for check in checks.values()]
    if not ready:
        overall_status = "unhealthy"
    elif any(status != "ok" for status in statuses):
        overall_status = "degraded"
    else:
        overall_status = "ready"

    return {
        "status": overall_status,
        "ready": ready,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {name: check.to_dict() for name, check in checks.items()},
    }
