"""Pricing health checker — read-only audit of settings and matrices.

Every check reports into the ``HealthReport``; nothing here raises or
writes. Overall status escalates healthy -> warning -> critical.
"""

from __future__ import annotations

from typing import Awaitable, Callable

import structlog

from printshop.pricing.constraints import ConstraintEngine
from printshop.pricing.engine import engine_status
from printshop.pricing.keys import normalize_book_size
from printshop.repositories.matrix import PricingMatrixRepository
from printshop.repositories.settings import ConfigStore
from printshop.schemas.health import HealthCheck, HealthReport

logger = structlog.get_logger()

_SEVERITY = {"healthy": 0, "warning": 1, "critical": 2}


class PricingHealthChecker:
    """Runs the fixed sequence of pricing checks."""

    def __init__(
        self,
        store: ConfigStore,
        matrices: PricingMatrixRepository,
        constraints: ConstraintEngine,
    ):
        self.store = store
        self.matrices = matrices
        self.constraints = constraints

    async def run(self) -> HealthReport:
        report = HealthReport()
        checks: list[tuple[str, Callable[[], Awaitable[HealthCheck]]]] = [
            ("database", self.check_database),
            ("product_parameters", self.check_product_parameters),
            ("pricing_engine", self.check_pricing_engine),
            ("pricing_matrices", self.check_pricing_matrices),
            ("orphaned_matrices", self.check_orphaned_matrices),
            ("order_form", self.check_order_form),
            ("cache", self.check_cache),
        ]
        for name, check in checks:
            try:
                result = await check()
            except Exception as e:
                logger.error("health_check_failed", check=name, error=str(e))
                result = HealthCheck(
                    status=False,
                    level="critical",
                    message=f"خطا در بررسی {name}: {e}",
                )
            self._record(report, name, result)

        logger.info(
            "pricing_health_checked",
            overall=report.overall_status,
            errors=len(report.errors),
            warnings=len(report.warnings),
        )
        return report

    @staticmethod
    def _record(report: HealthReport, name: str, result: HealthCheck) -> None:
        report.checks[name] = result
        report.recommendations.extend(result.recommendations)
        if result.level == "critical":
            report.errors.append(result.message)
            level = "critical"
        elif result.level == "warning":
            report.warnings.append(result.message)
            level = "warning"
        else:
            return
        if _SEVERITY[level] > _SEVERITY[report.overall_status]:
            report.overall_status = level

    async def check_database(self) -> HealthCheck:
        exists = await self.store.table_exists()
        return HealthCheck(
            status=exists,
            level="success" if exists else "critical",
            message="جدول تنظیمات موجود است" if exists else "جدول تنظیمات یافت نشد",
        )

    async def check_product_parameters(self) -> HealthCheck:
        sizes = await self.constraints.canonical_book_sizes()
        if not sizes:
            return HealthCheck(
                status=False,
                level="critical",
                message="هیچ قطع کتابی در تنظیمات محصول تعریف نشده",
                recommendations=["قطع‌های کتاب را در تنظیمات محصول تعریف کنید"],
            )
        return HealthCheck(
            status=True,
            level="success",
            message=f"{len(sizes)} قطع کتاب تعریف شده",
            data={"book_sizes": sizes},
        )

    async def check_pricing_engine(self) -> HealthCheck:
        status = await engine_status(self.store)
        enabled = status["is_v2_active"]
        return HealthCheck(
            status=enabled,
            level="success" if enabled else "warning",
            message="موتور قیمت‌گذاری V2 فعال است" if enabled else "موتور قیمت‌گذاری V2 غیرفعال است",
            data=status,
            recommendations=[] if enabled else ["موتور قیمت‌گذاری ماتریسی را فعال کنید"],
        )

    async def check_pricing_matrices(self) -> HealthCheck:
        sizes = await self.constraints.canonical_book_sizes()
        if not sizes:
            return HealthCheck(
                status=False,
                level="critical",
                message="نمی‌توان ماتریس‌ها را بررسی کرد: قطع‌ها تعریف نشده‌اند",
            )

        stored = {
            normalize_book_size(s.book_size): s
            for s in await self.matrices.scan()
            if s.book_size is not None
        }
        complete, incomplete, invalid, missing = [], [], [], []
        for size in sizes:
            entry = stored.get(normalize_book_size(size))
            if entry is None:
                missing.append(size)
            elif entry.matrix is None:
                invalid.append(size)
            elif entry.matrix.is_complete():
                complete.append(size)
            else:
                incomplete.append(size)

        data = {
            "complete": complete,
            "incomplete": incomplete,
            "invalid": invalid,
            "missing": missing,
        }
        recommendations = []
        if missing:
            recommendations.append(
                f"{len(missing)} قطع بدون ماتریس قیمت: برای این قطع‌ها قیمت تعریف کنید"
            )
        if incomplete:
            recommendations.append(
                f"ماتریس‌های ناقص برای: {', '.join(incomplete)} - باید قیمت صفحه و صحافی تعریف شوند"
            )
        if invalid:
            recommendations.append(
                f"ماتریس‌های نامعتبر برای: {', '.join(invalid)} - ماتریس را دوباره ذخیره کنید"
            )

        if not complete:
            return HealthCheck(
                status=False,
                level="critical",
                message="هیچ ماتریس قیمت کاملی وجود ندارد",
                data=data,
                recommendations=recommendations,
            )
        if incomplete or invalid or missing:
            return HealthCheck(
                status=True,
                level="warning",
                message=(
                    f"{len(complete)} ماتریس کامل، {len(incomplete)} ناقص، "
                    f"{len(invalid)} نامعتبر، {len(missing)} مفقود"
                ),
                data=data,
                recommendations=recommendations,
            )
        return HealthCheck(
            status=True,
            level="success",
            message=f"{len(complete)} ماتریس قیمت کامل",
            data=data,
        )

    async def check_orphaned_matrices(self) -> HealthCheck:
        valid = {normalize_book_size(s) for s in await self.constraints.canonical_book_sizes()}
        orphaned = [
            s.book_size or s.key
            for s in await self.matrices.scan()
            if s.book_size is None or normalize_book_size(s.book_size) not in valid
        ]
        if orphaned:
            return HealthCheck(
                status=True,
                level="warning",
                message=f"{len(orphaned)} ماتریس یتیم برای قطع‌های: {', '.join(orphaned)}",
                data={"orphaned": orphaned},
                recommendations=["ماتریس‌های یتیم را پاک‌سازی کنید"],
            )
        return HealthCheck(status=True, level="success", message="هیچ ماتریس یتیمی وجود ندارد")

    async def check_order_form(self) -> HealthCheck:
        sizes = await self.constraints.get_available_book_sizes(include_disabled=True)
        enabled = [info.size for info in sizes if info.enabled]
        disabled = [info.size for info in sizes if not info.enabled]
        data = {"enabled": enabled, "disabled": disabled}
        if not enabled:
            return HealthCheck(
                status=False,
                level="critical",
                message="فرم سفارش نمی‌تواند کار کند: هیچ قطع فعالی نیست",
                data=data,
                recommendations=[
                    "برای هر قطع، ماتریس قیمت کامل (با قیمت صفحه و صحافی) تنظیم کنید"
                ],
            )
        if disabled:
            return HealthCheck(
                status=True,
                level="warning",
                message=f"{len(enabled)} قطع فعال، {len(disabled)} غیرفعال",
                data=data,
            )
        return HealthCheck(
            status=True,
            level="success",
            message=f"{len(enabled)} قطع برای فرم سفارش فعال است",
            data=data,
        )

    async def check_cache(self) -> HealthCheck:
        cache = self.matrices.cache
        data = {
            "loaded": cache.loaded,
            "generation": cache.generation,
            "shared": self.matrices.counter is not None,
        }
        if await self.matrices.is_stale():
            return HealthCheck(
                status=False,
                level="warning",
                message="کش ماتریس‌ها قدیمی است و در درخواست بعدی بارگذاری مجدد می‌شود",
                data=data,
            )
        return HealthCheck(status=True, level="success", message="کش ماتریس‌ها سالم است", data=data)
