"""
Unit tests for the satellite brokers.

Tests fan-out completeness, failure propagation after all siblings have
finished, per-adapter instrumentation scoping and measurement aggregation.
"""

import io
import json

import pytest

from perfspotter.models import InstrumentationDescription, LoadConfig, WorkloadConfig
from perfspotter.satellites import (
    INSTRUMENTATION_EXCLUDES,
    INSTRUMENTATION_INCLUDES,
    InstrumentationBroker,
    MeasurementBroker,
    WorkloadBroker,
)
from perfspotter.satellites.base import current_time_millis
from perfspotter.validation import InstrumentationError, MeasurementError, WorkloadError


def _description():
    return InstrumentationDescription().add_entity("shop.checkout", "response_time")


@pytest.fixture
def instrumentation_broker():
    broker = InstrumentationBroker()
    yield broker
    broker.close()


@pytest.fixture
def measurement_broker():
    broker = MeasurementBroker()
    yield broker
    broker.close()


@pytest.mark.unit
class TestSatelliteBrokerFanOut:
    """Test cases for the shared fan-out behaviour."""

    def test_every_adapter_called_once(self, instrumentation_broker, call_log, fakes):
        """Test that an operation reaches every adapter exactly once."""
        adapters = [
            fakes.InstrumentationAdapter(fakes.make_descriptor("instrumentation", f"inst-{i}"), call_log)
            for i in range(3)
        ]
        instrumentation_broker.set_controllers(adapters)

        instrumentation_broker.initialize()

        for adapter in adapters:
            assert call_log.operations(adapter.name) == ["initialize"]

    def test_returns_only_after_slowest_adapter(self, instrumentation_broker, call_log, fakes):
        """Test that the broker call does not return while an adapter is still running."""
        fast = fakes.InstrumentationAdapter(fakes.make_descriptor("instrumentation", "fast"), call_log)
        slow = fakes.InstrumentationAdapter(
            fakes.make_descriptor("instrumentation", "slow"), call_log, delays={"uninstrument": 0.2}
        )
        instrumentation_broker.set_controllers([fast, slow])

        instrumentation_broker.uninstrument()

        assert slow.completed == ["uninstrument"]
        assert fast.completed == ["uninstrument"]

    def test_zero_adapters_completes(self, instrumentation_broker):
        """Test that a broker without adapters completes every operation immediately."""
        instrumentation_broker.instrument(_description())
        instrumentation_broker.uninstrument()

        assert instrumentation_broker.adapters == []
        assert instrumentation_broker.get_stats()["tasks_submitted"] == 0

    def test_failure_raised_after_siblings_finish(self, instrumentation_broker, call_log, fakes):
        """Test that a failing adapter does not cancel its slower siblings."""
        failing = fakes.InstrumentationAdapter(
            fakes.make_descriptor("instrumentation", "failing"), call_log, fail_on={"uninstrument"}
        )
        slow = fakes.InstrumentationAdapter(
            fakes.make_descriptor("instrumentation", "slow"), call_log, delays={"uninstrument": 0.2}
        )
        instrumentation_broker.set_controllers([failing, slow])

        with pytest.raises(InstrumentationError) as exc_info:
            instrumentation_broker.uninstrument()

        assert slow.completed == ["uninstrument"]
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert "failing" in str(exc_info.value)

    def test_failure_of_broker_kind_is_raised_unchanged(self, call_log, fakes):
        """Test that an adapter error already of the broker's kind is not wrapped."""
        original = WorkloadError("load generator unreachable")
        adapter = fakes.WorkloadAdapter(
            fakes.make_descriptor("workload", "load-1"), call_log,
            fail_on={"wait_for_finished_load"}, error=original,
        )
        broker = WorkloadBroker()
        broker.set_controllers([adapter])
        try:
            with pytest.raises(WorkloadError) as exc_info:
                broker.wait_for_finished_load()
        finally:
            broker.close()

        assert exc_info.value is original

    def test_additional_failures_attached_as_notes(self, measurement_broker, call_log, fakes):
        """Test that every failing adapter is mentioned in the raised error."""
        adapters = [
            fakes.MeasurementAdapter(
                fakes.make_descriptor("measurement", name), call_log, fail_on={"disable_monitoring"}
            )
            for name in ("meas-a", "meas-b")
        ]
        measurement_broker.set_controllers(adapters)

        with pytest.raises(MeasurementError) as exc_info:
            measurement_broker.disable_monitoring()

        assert "meas-a" in str(exc_info.value)
        assert any("meas-b" in note for note in exc_info.value.__notes__)

    def test_set_controllers_replaces_adapters(self, instrumentation_broker, call_log, fakes):
        """Test that set_controllers replaces the previous working set."""
        first = fakes.InstrumentationAdapter(fakes.make_descriptor("instrumentation", "first"), call_log)
        second = fakes.InstrumentationAdapter(fakes.make_descriptor("instrumentation", "second"), call_log)
        instrumentation_broker.set_controllers([first])
        instrumentation_broker.set_controllers([second])

        instrumentation_broker.initialize()

        assert call_log.operations("first") == []
        assert call_log.operations("second") == ["initialize"]

    def test_get_properties_merges_adapters(self, instrumentation_broker, call_log, fakes):
        """Test that later adapters win on conflicting property keys."""
        instrumentation_broker.set_controllers([
            fakes.InstrumentationAdapter(
                fakes.make_descriptor("instrumentation", "a", shared="a", only_a="1"), call_log
            ),
            fakes.InstrumentationAdapter(
                fakes.make_descriptor("instrumentation", "b", shared="b"), call_log
            ),
        ])

        assert instrumentation_broker.get_properties() == {"shared": "b", "only_a": "1"}


@pytest.mark.unit
class TestInstrumentationBroker:
    """Test cases for InstrumentationBroker."""

    def test_empty_description_rejected_before_dispatch(self, instrumentation_broker, call_log, fakes):
        """Test that an empty description fails without contacting any satellite."""
        instrumentation_broker.set_controllers(
            [fakes.InstrumentationAdapter(fakes.make_descriptor("instrumentation", "inst-1"), call_log)]
        )

        with pytest.raises(InstrumentationError):
            instrumentation_broker.instrument(InstrumentationDescription())
        with pytest.raises(InstrumentationError):
            instrumentation_broker.instrument(None)

        assert call_log.entries == []

    def test_adapter_scope_added_to_its_copy_only(self, instrumentation_broker, call_log, fakes):
        """Test that each adapter receives the description with its own include/exclude filters."""
        scoped = fakes.InstrumentationAdapter(
            fakes.make_descriptor(
                "instrumentation", "scoped",
                **{INSTRUMENTATION_INCLUDES: "shop.web, shop.db", INSTRUMENTATION_EXCLUDES: "shop.test"},
            ),
            call_log,
        )
        plain = fakes.InstrumentationAdapter(fakes.make_descriptor("instrumentation", "plain"), call_log)
        instrumentation_broker.set_controllers([scoped, plain])
        description = _description()

        instrumentation_broker.instrument(description)

        received = scoped.descriptions[0]
        assert received.restriction.inclusions == {"shop.web", "shop.db"}
        assert received.restriction.exclusions == {"shop.test"}
        assert plain.descriptions[0].restriction.is_empty()
        assert description.restriction.is_empty()
        assert received.entities[0].scope == "shop.checkout"


@pytest.mark.unit
class TestMeasurementBroker:
    """Test cases for MeasurementBroker."""

    def test_measurement_data_concatenated_in_adapter_order(self, measurement_broker, call_log, fakes):
        """Test that records of all satellites are combined in adapter order."""
        measurement_broker.set_controllers([
            fakes.MeasurementAdapter(fakes.make_descriptor("measurement", name), call_log)
            for name in ("meas-a", "meas-b")
        ])

        data = measurement_broker.get_measurement_data()

        assert [r["satellite"] for r in data.records] == ["meas-a", "meas-b"]

    def test_pipe_to_output_stream_writes_one_record_per_line(self, measurement_broker, call_log, fakes):
        """Test that piped data of all satellites ends up in the stream."""
        measurement_broker.set_controllers([
            fakes.MeasurementAdapter(fakes.make_descriptor("measurement", name), call_log)
            for name in ("meas-a", "meas-b")
        ])
        stream = io.StringIO()

        measurement_broker.pipe_to_output_stream(stream)

        lines = stream.getvalue().splitlines()
        assert [json.loads(line)["satellite"] for line in lines] == ["meas-a", "meas-b"]

    def test_enable_monitoring_sets_relative_time(self, measurement_broker, call_log, fakes):
        """Test that the clock offset of each satellite is estimated before enabling."""
        adapter = fakes.MeasurementAdapter(fakes.make_descriptor("measurement", "meas-1"), call_log)
        satellite_clock = current_time_millis() + 60_000
        adapter.get_current_time = lambda: satellite_clock
        measurement_broker.set_controllers([adapter])

        measurement_broker.enable_monitoring()

        assert call_log.operations("meas-1") == ["enable_monitoring"]
        assert abs(adapter.controller_relative_time - satellite_clock) < 5_000

    def test_prepare_and_reset_reach_every_satellite(self, measurement_broker, call_log, fakes):
        """Test that sampling requests and buffer resets are fanned out to all satellites."""
        adapters = [
            fakes.MeasurementAdapter(fakes.make_descriptor("measurement", name), call_log)
            for name in ("meas-a", "meas-b")
        ]
        measurement_broker.set_controllers(adapters)
        description = _description().add_sampler("memory", 250)

        measurement_broker.prepare_monitoring(description)
        measurement_broker.reset_monitoring()

        for adapter in adapters:
            assert call_log.operations(adapter.name) == ["prepare_monitoring", "reset_monitoring"]
            assert adapter.prepared[0].samplers[0].resource == "memory"

    def test_store_report_reaches_every_satellite(self, measurement_broker, call_log, fakes):
        """Test that store_report is fanned out with the experiment path."""
        adapters = [
            fakes.MeasurementAdapter(fakes.make_descriptor("measurement", name), call_log)
            for name in ("meas-a", "meas-b")
        ]
        measurement_broker.set_controllers(adapters)

        measurement_broker.store_report("/tmp/run/data/1")

        assert all(a.reports == ["/tmp/run/data/1"] for a in adapters)


@pytest.mark.unit
class TestWorkloadBroker:
    """Test cases for WorkloadBroker."""

    def test_start_load_forwards_load_config(self, call_log, fakes):
        """Test that every workload satellite receives the same load profile."""
        adapters = [
            fakes.WorkloadAdapter(fakes.make_descriptor("workload", name), call_log)
            for name in ("load-a", "load-b")
        ]
        broker = WorkloadBroker()
        broker.set_controllers(adapters)
        load = LoadConfig.from_workload(WorkloadConfig(), num_users=7)
        try:
            broker.start_load(load)
        finally:
            broker.close()

        assert [a.loads for a in adapters] == [[load], [load]]
