# backend/tests/services/test_base_service.py
"""Tests for BaseService transaction handling and operation metrics."""

import pytest
from sqlalchemy.exc import OperationalError

from visit_sync.core.exceptions import NotFoundException, ServiceException, UniqueConstraintViolation
from visit_sync.models import Prison
from visit_sync.monitoring.prometheus_metrics import REGISTRY
from visit_sync.services.base import BaseService


class SampleService(BaseService):
    @BaseService.measure_operation("sample.ok")
    def succeed(self):
        return "ok"

    @BaseService.measure_operation("sample.fail")
    def fail(self):
        raise NotFoundException("missing")


class TestTransaction:
    def test_commits_on_success(self, db):
        service = SampleService(db)

        with service.transaction():
            db.add(Prison(id="BXI", description="Brixton (HMP)"))

        db.expunge_all()
        assert db.get(Prison, "BXI") is not None

    def test_domain_errors_roll_back_and_propagate(self, db):
        service = SampleService(db)

        with pytest.raises(NotFoundException):
            with service.transaction():
                db.add(Prison(id="BXI", description="Brixton (HMP)"))
                db.flush()
                raise NotFoundException("gone")

        assert db.get(Prison, "BXI") is None

    def test_database_errors_become_service_exceptions(self, db):
        service = SampleService(db)

        with pytest.raises(ServiceException) as exc_info:
            with service.transaction():
                raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))

        assert "Database operation failed" in exc_info.value.message

    def test_repository_errors_become_service_exceptions(self, db):
        service = SampleService(db)

        with pytest.raises(ServiceException) as exc_info:
            with service.transaction():
                db.add(Prison(id="BXI", description="Brixton (HMP)"))
                db.flush()
                raise UniqueConstraintViolation("Integrity constraint violated for Prison")

        assert exc_info.value.details == {"error_type": "UniqueConstraintViolation"}
        assert exc_info.value.to_http_exception().status_code == 500
        assert db.get(Prison, "BXI") is None


def _operations_total(operation: str, status: str) -> float:
    value = REGISTRY.get_sample_value(
        "visit_sync_service_operations_total",
        {"service": "SampleService", "operation": operation, "status": status},
    )
    return value or 0.0


class TestMeasureOperation:
    def test_records_success_and_failure_counts(self, db):
        service = SampleService(db)
        succeeded = _operations_total("sample.ok", "success")
        failed = _operations_total("sample.fail", "error")

        assert service.succeed() == "ok"
        with pytest.raises(NotFoundException):
            service.fail()

        assert _operations_total("sample.ok", "success") == succeeded + 1
        assert _operations_total("sample.fail", "error") == failed + 1
        errors = REGISTRY.get_sample_value(
            "visit_sync_errors_total",
            {"service": "SampleService", "operation": "sample.fail", "error_type": "NotFoundException"},
        )
        assert errors >= 1
