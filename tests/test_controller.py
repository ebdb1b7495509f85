import io
import logging

import pytest

from conftest import FakeDnsProvider, FakeInventory, make_config, make_instance
from fleet_dns.controller import Reconciler, configure_logging
from fleet_dns.models import (
    CurrentRecord,
    InventoryFetchError,
    MutationApplyError,
    ReconcileAborted,
    RecordFetchError,
)


def _fleet():
    return [
        make_instance("i-1", "web.example.com", private="10.0.0.1", public="54.0.0.1"),
        make_instance("i-7", "0007.worker.example.com", private="10.0.0.7"),
        make_instance("i-12", "0012.worker.example.com", private="10.0.0.12"),
        make_instance("i-2", "db.internal.example.com", private="10.0.1.2"),
        make_instance("i-3", None),
    ]


def _reconciler(zones, instances, config=None, records=None):
    dns = FakeDnsProvider(zones, records)
    output = io.StringIO()
    reconciler = Reconciler(config or make_config(), dns, FakeInventory(instances), output=output)
    return reconciler, dns, output


def test_run_applies_one_batch_per_zone(zones):
    reconciler, dns, output = _reconciler(zones, _fleet())

    result = reconciler.run()

    assert [zone_id for zone_id, _ in dns.apply_calls] == ["ZCOM", "ZINT"]
    assert result.applied == ["ZCOM", "ZINT"]
    names = [mutation.name for mutation in dns.apply_calls[0][1]]
    assert names == [
        "web.example.com",
        "private.web.example.com",
        "private.0007.worker.example.com",
        "private.0012.worker.example.com",
        "private.worker.example.com",
    ]
    assert "private.worker.example.com" in output.getvalue()


def test_second_run_is_a_no_op(zones):
    reconciler, dns, output = _reconciler(zones, _fleet())
    reconciler.run()
    output.truncate(0)
    output.seek(0)

    result = reconciler.run()

    assert not result.has_changes()
    assert len(dns.apply_calls) == 2
    assert output.getvalue() == ""


def test_only_changed_records_are_submitted(zones):
    records = {
        "ZCOM": [
            CurrentRecord(name="web.example.com.", type="A", ttl=300, values=frozenset({"54.0.0.1"})),
            CurrentRecord(name="private.web.example.com.", type="A", ttl=300, values=frozenset({"10.9.9.9"})),
        ]
    }
    instances = [make_instance("i-1", "web.example.com", private="10.0.0.1", public="54.0.0.1")]
    reconciler, dns, _ = _reconciler(zones, instances, records=records)

    reconciler.run()

    assert [(zone_id, [m.name for m in batch]) for zone_id, batch in dns.apply_calls] == [
        ("ZCOM", ["private.web.example.com"])
    ]


def test_zone_without_changes_is_not_applied(zones):
    records = {
        "ZCOM": [CurrentRecord(name="private.web.example.com.", type="A", ttl=300, values=frozenset({"10.0.0.1"}))]
    }
    reconciler, dns, output = _reconciler(zones, [make_instance("i-1", "web.example.com")], records=records)

    result = reconciler.run()

    assert dns.fetch_calls == ["ZCOM"]
    assert dns.apply_calls == []
    assert result.changes == {}
    assert output.getvalue() == ""


def test_dry_run_reports_without_applying(zones):
    reconciler, dns, output = _reconciler(zones, _fleet(), config=make_config(dry_run=True))

    result = reconciler.run()

    assert dns.apply_calls == []
    assert result.applied == []
    assert result.total() == 6
    text = output.getvalue()
    assert "private.db.internal.example.com" in text
    assert "(dry run)" in text


def test_explicit_dry_run_overrides_config(zones):
    reconciler, dns, _ = _reconciler(zones, _fleet(), config=make_config(dry_run=False))

    reconciler.run(dry_run=True)

    assert dns.apply_calls == []


def test_ignored_zone_is_never_fetched(zones):
    reconciler, dns, _ = _reconciler(zones, _fleet(), config=make_config(ignore_zones=frozenset({"internal.example.com"})))

    reconciler.run()

    assert dns.fetch_calls == ["ZCOM"]


def test_record_fetch_failure_propagates_and_stops(zones):
    reconciler, dns, output = _reconciler(zones, _fleet())
    dns.failing_fetch.add("ZINT")

    with pytest.raises(RecordFetchError):
        reconciler.run()

    assert [zone_id for zone_id, _ in dns.apply_calls] == ["ZCOM"]
    assert output.getvalue() == ""


def test_apply_failure_propagates_and_leaves_later_zones(zones):
    reconciler, dns, _ = _reconciler(zones, _fleet())
    dns.failing_apply.add("ZCOM")

    with pytest.raises(MutationApplyError):
        reconciler.run()

    assert dns.fetch_calls == ["ZCOM"]
    assert dns.apply_calls == []


def test_inventory_failure_aborts_before_any_zone_work(zones):
    class BrokenInventory:
        def list_instances(self):
            raise InventoryFetchError("describe failed")

    dns = FakeDnsProvider(zones)
    reconciler = Reconciler(make_config(), dns, BrokenInventory(), output=io.StringIO())

    with pytest.raises(InventoryFetchError):
        reconciler.run()

    assert dns.fetch_calls == []


def test_abort_is_checked_before_each_zone(zones):
    reconciler, dns, _ = _reconciler(zones, _fleet())
    checks = []

    def should_abort():
        checks.append(True)
        return len(checks) > 1

    with pytest.raises(ReconcileAborted):
        reconciler.run(should_abort=should_abort)

    assert dns.fetch_calls == ["ZCOM"]
    assert [zone_id for zone_id, _ in dns.apply_calls] == ["ZCOM"]


def test_zone_domain_appears_in_progress_log(zones, caplog):
    reconciler, _, _ = _reconciler(zones, _fleet())

    with caplog.at_level(logging.INFO, logger="fleet_dns"):
        reconciler.run(dry_run=True)

    assert "Zone internal.example.com (ZINT): 1 of 1 record sets need changes" in caplog.text


def test_configure_logging_sets_package_level_when_root_is_configured(monkeypatch):
    root = logging.getLogger()
    package_logger = logging.getLogger("fleet_dns")
    handler = logging.NullHandler()
    monkeypatch.setattr(root, "handlers", [handler])
    original_level = package_logger.level
    package_logger.setLevel(logging.NOTSET)

    try:
        configure_logging("debug")

        assert root.handlers == [handler]
        assert package_logger.level == logging.DEBUG
        assert package_logger.isEnabledFor(logging.INFO)
    finally:
        package_logger.setLevel(original_level)
