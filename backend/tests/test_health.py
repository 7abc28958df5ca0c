"""
Tests for health check helpers.
"""

import asyncio

import pytest

from shared.utils.health import HealthStatus, aggregate_health_checks, health_check_with_timeout


@health_check_with_timeout(timeout=1.0, component="store")
async def check_ok():
    return {"backend": "memory"}


@health_check_with_timeout(timeout=1.0)
async def check_broken():
    raise ConnectionError("refused")


@health_check_with_timeout(timeout=0.01, component="slow")
async def check_slow():
    await asyncio.sleep(1)


class TestHealthChecks:
    @pytest.mark.asyncio
    async def test_healthy_probe_keeps_details(self):
        result = await check_ok()
        assert result.status == HealthStatus.HEALTHY
        assert result.to_dict()["details"] == {"backend": "memory"}

    @pytest.mark.asyncio
    async def test_failure_is_reported_not_raised(self):
        result = await check_broken()
        assert result.component == "broken"
        assert result.status == HealthStatus.UNHEALTHY
        assert result.error == "refused"

    @pytest.mark.asyncio
    async def test_timeout(self):
        result = await check_slow()
        assert result.status == HealthStatus.UNHEALTHY
        assert result.error.startswith("timeout")

    @pytest.mark.asyncio
    async def test_aggregate_degrades_on_any_failure(self):
        healthy = await aggregate_health_checks([check_ok()])
        degraded = await aggregate_health_checks([check_ok(), check_broken()])

        assert healthy["status"] == "healthy"
        assert degraded["status"] == "degraded"
        assert set(degraded["components"]) == {"store", "broken"}
