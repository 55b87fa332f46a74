"""
Tests for performance monitoring.
"""
import asyncio
import pytest
from app.core.logging import correlation_id_var
from app.core.performance import PerformanceMonitor, track_performance, _metrics


def test_performance_monitor_record():
    """Recorded values are summarized."""
    PerformanceMonitor.clear_metrics()

    PerformanceMonitor.record_metric("test_metric", 1.5, {"test": "data"})
    PerformanceMonitor.record_metric("test_metric", 2.0)
    PerformanceMonitor.record_metric("test_metric", 0.5)

    stats = PerformanceMonitor.get_stats("test_metric")

    assert stats["count"] == 3
    assert stats["min"] == 0.5
    assert stats["max"] == 2.0
    assert stats["mean"] == pytest.approx(1.333, rel=0.01)
    assert stats["p50"] == 1.5


def test_samples_are_capped():
    PerformanceMonitor.clear_metrics()
    for i in range(1200):
        PerformanceMonitor.record_metric("capped", float(i))

    stats = PerformanceMonitor.get_stats("capped")
    assert stats["count"] == 1000
    assert stats["min"] == 200


def test_performance_decorator_sync():
    PerformanceMonitor.clear_metrics()

    @track_performance("test_function")
    def double(x: int) -> int:
        return x * 2

    assert double(5) == 10
    assert PerformanceMonitor.get_stats("test_function")["count"] == 1


def test_performance_decorator_records_failures():
    PerformanceMonitor.clear_metrics()

    @track_performance("failing")
    def fail():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        fail()

    sample = _metrics["failing"][0]
    assert sample["metadata"]["status"] == "error"
    assert sample["metadata"]["error"] == "boom"


def test_performance_decorator_tags_correlation_id():
    PerformanceMonitor.clear_metrics()

    @track_performance("tagged")
    def work():
        return 1

    token = correlation_id_var.set("req-123")
    try:
        work()
    finally:
        correlation_id_var.reset(token)

    assert _metrics["tagged"][0]["metadata"]["correlation_id"] == "req-123"


@pytest.mark.asyncio
async def test_performance_decorator_async():
    PerformanceMonitor.clear_metrics()

    @track_performance("test_async_function")
    async def double(x: int) -> int:
        await asyncio.sleep(0.01)
        return x * 2

    assert await double(5) == 10

    stats = PerformanceMonitor.get_stats("test_async_function")
    assert stats["count"] == 1
    assert stats["mean"] > 0


def test_performance_monitor_clear():
    PerformanceMonitor.record_metric("test", 1.0)
    assert PerformanceMonitor.get_stats("test") is not None

    PerformanceMonitor.clear_metrics()
    assert PerformanceMonitor.get_stats("test") is None
    assert PerformanceMonitor.get_all_metrics() == {}
