"""Tests for the pricing health checker."""

from unittest.mock import AsyncMock

import pytest

from printshop.pricing.cache import GenerationCounter
from printshop.pricing.constraints import ConstraintEngine
from printshop.pricing.health import PricingHealthChecker


def _checker(store, matrices):
    return PricingHealthChecker(store, matrices, ConstraintEngine(matrices, store))


class TestPricingHealthChecker:
    @pytest.mark.asyncio
    async def test_healthy(self, store, matrices, a5_matrix):
        await store.set_json("book_sizes", ["A5"])
        await store.set("pricing_engine_v2_enabled", "1")
        await matrices.save_matrix("A5", a5_matrix)

        report = await _checker(store, matrices).run()

        assert report.overall_status == "healthy"
        assert list(report.checks) == [
            "database",
            "product_parameters",
            "pricing_engine",
            "pricing_matrices",
            "orphaned_matrices",
            "order_form",
            "cache",
        ]
        assert all(check.level == "success" for check in report.checks.values())
        assert report.errors == []
        assert report.warnings == []

    @pytest.mark.asyncio
    async def test_nothing_configured_is_critical(self, store, matrices):
        report = await _checker(store, matrices).run()

        assert report.overall_status == "critical"
        assert report.checks["pricing_matrices"].level == "critical"
        assert report.checks["order_form"].level == "critical"
        assert report.checks["pricing_engine"].level == "warning"
        assert report.recommendations

    @pytest.mark.asyncio
    async def test_engine_off_is_warning(self, store, matrices, a5_matrix):
        await store.set_json("book_sizes", ["A5"])
        await matrices.save_matrix("A5", a5_matrix)

        report = await _checker(store, matrices).run()

        assert report.overall_status == "warning"
        engine = report.checks["pricing_engine"]
        assert engine.data["is_null"] is True
        assert engine.data["engine"] == "v1_legacy"

    @pytest.mark.asyncio
    async def test_incomplete_and_orphaned_matrices(self, store, matrices, a5_matrix):
        await store.set_json("book_sizes", ["A5", "وزیری"])
        await store.set("pricing_engine_v2_enabled", "1")
        await matrices.save_matrix("A5", a5_matrix)
        await matrices.save_matrix("وزیری", a5_matrix.model_copy(update={"binding_costs": {}}))
        await matrices.save_matrix("A3", a5_matrix)

        report = await _checker(store, matrices).run()

        assert report.overall_status == "warning"
        assert report.checks["pricing_matrices"].data["incomplete"] == ["وزیری"]
        assert report.checks["orphaned_matrices"].data["orphaned"] == ["A3"]
        assert report.checks["order_form"].data == {"enabled": ["A5"], "disabled": ["وزیری"]}

    @pytest.mark.asyncio
    async def test_failing_check_is_reported_not_raised(self, store, matrices, a5_matrix):
        await store.set_json("book_sizes", ["A5"])
        await store.set("pricing_engine_v2_enabled", "1")
        await matrices.save_matrix("A5", a5_matrix)
        checker = _checker(store, matrices)
        checker.check_database = AsyncMock(side_effect=RuntimeError("connection lost"))

        report = await checker.run()

        assert report.overall_status == "critical"
        assert report.checks["database"].level == "critical"
        assert "connection lost" in report.checks["database"].message
        assert len(report.checks) == 7

    @pytest.mark.asyncio
    async def test_stale_shared_cache_is_warning(self, store, shared_matrices, mock_redis, a5_matrix):
        await store.set_json("book_sizes", ["A5"])
        await store.set("pricing_engine_v2_enabled", "1")
        await shared_matrices.save_matrix("A5", a5_matrix)
        await shared_matrices.get_all()
        mock_redis.values[GenerationCounter.KEY] = "5"

        checker = _checker(store, shared_matrices)
        check = await checker.check_cache()

        assert check.level == "warning"
        assert check.data["shared"] is True
