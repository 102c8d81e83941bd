"""
Prometheus metrics for the visit sync service.

Service operation timings come from BaseService.measure_operation; visit
lifecycle counters are bumped by VisitService and the slot provisioner.
"""

from typing import Optional

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "visit_sync_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "visit_sync_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "visit_sync_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

visit_transitions_total = Counter(
    "visit_sync_visit_transitions_total",
    "Visit lifecycle transitions applied",
    ["transition"],
    registry=REGISTRY,
)

scheduling_rows_provisioned_total = Counter(
    "visit_sync_scheduling_rows_provisioned_total",
    "Scheduling rows created on first demand",
    ["kind"],
    registry=REGISTRY,
)

provisioning_races_total = Counter(
    "visit_sync_provisioning_races_total",
    "Unique constraint collisions resolved by re-reading",
    ["kind"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin facade over the module-level collectors."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'VisitService')
            operation: Operation name (e.g., 'visit.create')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def inc_visit_transition(transition: str) -> None:
        visit_transitions_total.labels(transition=transition).inc()

    @staticmethod
    def inc_scheduling_row_provisioned(kind: str) -> None:
        scheduling_rows_provisioned_total.labels(kind=kind).inc()

    @staticmethod
    def inc_provisioning_race(kind: str) -> None:
        provisioning_races_total.labels(kind=kind).inc()

    @staticmethod
    def get_metrics() -> bytes:
        return generate_latest(REGISTRY)

    @staticmethod
    def get_content_type() -> str:
        return CONTENT_TYPE_LATEST


prometheus_metrics = PrometheusMetrics()
