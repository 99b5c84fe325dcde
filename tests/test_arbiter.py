from __future__ import annotations

import asyncio
import logging

import pytest
from fakes import FakeRealFeed, FakeSimulatedFeed

from pyplotfinder._constants import REFERENCE_LAT, REFERENCE_LNG
from pyplotfinder.exceptions import LocationFeedError, LocationUnavailableError
from pyplotfinder.location.arbiter import LocationArbiter
from pyplotfinder.models.geo import Coordinates
from pyplotfinder.models.location import ArbiterState, LocationFix, LocationSource

REFERENCE = Coordinates(lat=REFERENCE_LAT, lng=REFERENCE_LNG)
NEAR = LocationFix(lat=REFERENCE_LAT + 0.001, lng=REFERENCE_LNG, accuracy=6.0)
FAR = LocationFix(lat=REFERENCE_LAT + 0.2, lng=REFERENCE_LNG, accuracy=6.0)


def _arbiter(
    real: FakeRealFeed | None = None,
    simulated: FakeSimulatedFeed | None = None,
    **kwargs: object,
) -> LocationArbiter:
    kwargs.setdefault("live_report_interval", 0)
    return LocationArbiter(
        simulated_feed=simulated or FakeSimulatedFeed(),
        real_feed=real,
        reference_point=REFERENCE,
        clock=lambda: 1_700_000_000.0,
        **kwargs,  # type: ignore[arg-type]
    )


def test_initial_state_is_disabled_and_routes_from_reference() -> None:
    arbiter = _arbiter(FakeRealFeed())

    assert arbiter.state is ArbiterState.DISABLED
    assert arbiter.mode is LocationSource.REAL
    assert arbiter.origin_state.consent_granted is False
    assert arbiter.origin_state.current_fix is None
    assert arbiter.effective_origin() == (REFERENCE, True)


def test_grant_consent_starts_request_and_watch() -> None:
    real = FakeRealFeed()
    arbiter = _arbiter(real)

    assert arbiter.grant_consent() is True
    assert arbiter.state is ArbiterState.REAL_PENDING
    assert real.requests == 1
    assert len(real.active_watchers) == 1

    real.emit(NEAR)
    assert arbiter.state is ArbiterState.REAL_ACTIVE
    assert arbiter.current_fix == NEAR
    assert arbiter.current_source is LocationSource.REAL
    assert [sample.source for sample in arbiter.samples] == [LocationSource.REAL]


def test_feed_losing_the_device_degrades_to_disabled() -> None:
    real = FakeRealFeed()
    arbiter = _arbiter(real)
    arbiter.grant_consent()
    real.emit(NEAR)

    real.fail(LocationUnavailableError("broker refused"))
    assert arbiter.state is ArbiterState.DISABLED
    assert arbiter.current_fix is None
    assert arbiter.consent_granted is True
    assert real.active_watchers == []

    real.emit(FAR)
    assert arbiter.current_fix is None


def test_one_shot_fix_activates_real_tracking() -> None:
    real = FakeRealFeed(initial_fix=NEAR)
    arbiter = _arbiter(real)

    arbiter.grant_consent()
    assert arbiter.state is ArbiterState.REAL_ACTIVE
    assert len(arbiter.samples) == 1


def test_granting_consent_twice_keeps_one_subscription() -> None:
    real = FakeRealFeed()
    arbiter = _arbiter(real)

    arbiter.grant_consent()
    arbiter.grant_consent()
    assert len(real.watchers) == 1


def test_switch_to_simulated_stops_real_feed_immediately() -> None:
    real = FakeRealFeed()
    simulated = FakeSimulatedFeed()
    arbiter = _arbiter(real, simulated)
    arbiter.grant_consent()
    real.emit(NEAR)

    arbiter.set_simulated(True)
    assert arbiter.state is ArbiterState.SIMULATED_ACTIVE
    assert arbiter.current_fix is None
    assert real.active_watchers == []
    assert len(simulated.active_watchers) == 1

    # a callback queued by the real feed before the switch
    real.emit(FAR)
    assert [sample.source for sample in arbiter.samples] == [LocationSource.REAL]
    assert arbiter.current_fix is None

    simulated.emit(NEAR)
    assert [sample.source for sample in arbiter.samples] == [LocationSource.REAL, LocationSource.SIMULATED]
    assert arbiter.current_source is LocationSource.SIMULATED


def test_simulated_mode_needs_no_consent() -> None:
    simulated = FakeSimulatedFeed()
    arbiter = _arbiter(None, simulated)

    arbiter.set_simulated(True)
    simulated.emit(NEAR)
    assert arbiter.state is ArbiterState.SIMULATED_ACTIVE
    assert arbiter.origin_state.consent_granted is False
    assert arbiter.effective_origin() == (NEAR.coordinates, False)


def test_leaving_simulated_mode_with_consent_restarts_real_feed() -> None:
    real = FakeRealFeed()
    simulated = FakeSimulatedFeed()
    arbiter = _arbiter(real, simulated)
    arbiter.grant_consent()
    arbiter.set_simulated(True)

    arbiter.set_simulated(False)
    assert arbiter.state is ArbiterState.REAL_PENDING
    assert simulated.active_watchers == []
    assert len(real.watchers) == 2
    assert len(real.active_watchers) == 1

    simulated.emit(FAR)
    assert len(arbiter.samples) == 0


def test_leaving_simulated_mode_without_consent_disables() -> None:
    simulated = FakeSimulatedFeed()
    arbiter = _arbiter(FakeRealFeed(), simulated)
    arbiter.set_simulated(True)
    simulated.emit(NEAR)

    arbiter.set_simulated(False)
    assert arbiter.state is ArbiterState.DISABLED
    assert arbiter.current_fix is None
    assert simulated.active_watchers == []


def test_consent_granted_in_simulated_mode_waits_for_real_mode() -> None:
    real = FakeRealFeed()
    arbiter = _arbiter(real)
    arbiter.set_simulated(True)

    assert arbiter.grant_consent() is True
    assert real.watchers == []

    arbiter.set_simulated(False)
    assert arbiter.state is ArbiterState.REAL_PENDING
    assert len(real.active_watchers) == 1


def test_missing_capability_degrades_to_disabled(caplog: pytest.LogCaptureFixture) -> None:
    arbiter = _arbiter(None)

    with caplog.at_level(logging.WARNING, logger="pyplotfinder.location.arbiter"):
        assert arbiter.grant_consent() is False
    assert arbiter.state is ArbiterState.DISABLED
    assert "unavailable" in caplog.text


def test_unavailable_feed_degrades_to_disabled() -> None:
    assert _arbiter(FakeRealFeed(available=False)).grant_consent() is False

    real = FakeRealFeed(fail_start=True)
    arbiter = _arbiter(real)
    assert arbiter.grant_consent() is False
    assert arbiter.state is ArbiterState.DISABLED


def test_feed_errors_are_logged_and_watch_continues(caplog: pytest.LogCaptureFixture) -> None:
    real = FakeRealFeed()
    arbiter = _arbiter(real)
    arbiter.grant_consent()

    with caplog.at_level(logging.WARNING, logger="pyplotfinder.location.arbiter"):
        real.fail(LocationFeedError("timeout"))
    assert "timeout" in caplog.text
    assert arbiter.state is ArbiterState.REAL_PENDING

    real.emit(NEAR)
    assert arbiter.state is ArbiterState.REAL_ACTIVE


def test_revoke_consent_stops_real_feed() -> None:
    real = FakeRealFeed()
    arbiter = _arbiter(real)
    arbiter.grant_consent()
    real.emit(NEAR)

    arbiter.revoke_consent()
    assert arbiter.state is ArbiterState.DISABLED
    assert arbiter.current_fix is None
    assert real.active_watchers == []

    real.emit(NEAR)
    assert len(arbiter.samples) == 1


def test_effective_origin_is_recomputed_on_every_fix() -> None:
    real = FakeRealFeed()
    arbiter = _arbiter(real)
    arbiter.grant_consent()

    real.emit(FAR)
    assert arbiter.effective_origin() == (REFERENCE, True)
    real.emit(NEAR)
    assert arbiter.effective_origin() == (NEAR.coordinates, False)


def test_listeners_fire_on_state_changes_and_fixes() -> None:
    real = FakeRealFeed()
    arbiter = _arbiter(real)
    calls: list[ArbiterState] = []
    remove = arbiter.add_listener(lambda: calls.append(arbiter.state))

    arbiter.grant_consent()
    real.emit(NEAR)
    assert calls == [ArbiterState.REAL_PENDING, ArbiterState.REAL_ACTIVE]

    remove()
    real.emit(NEAR)
    assert len(calls) == 2


def test_failing_listener_does_not_break_the_arbiter() -> None:
    real = FakeRealFeed()
    arbiter = _arbiter(real)

    def boom() -> None:
        raise RuntimeError("listener bug")

    arbiter.add_listener(boom)
    arbiter.grant_consent()
    real.emit(NEAR)
    assert arbiter.state is ArbiterState.REAL_ACTIVE


def test_select_series_is_forwarded_to_simulated_feed() -> None:
    simulated = FakeSimulatedFeed()
    arbiter = _arbiter(None, simulated)

    arbiter.select_series("east-section", 500)
    assert simulated.selected == [("east-section", 500)]


def test_sample_log_stays_bounded() -> None:
    simulated = FakeSimulatedFeed()
    arbiter = _arbiter(None, simulated)
    arbiter.set_simulated(True)

    for _ in range(1000):
        simulated.emit(NEAR)
    assert len(arbiter.samples) == 50
    assert arbiter.samples.snapshot()[0].seq == 951
    assert arbiter.samples.snapshot()[-1].seq == 1000


def test_close_cancels_subscription() -> None:
    real = FakeRealFeed()
    arbiter = _arbiter(real)
    arbiter.grant_consent()

    arbiter.close()
    assert arbiter.state is ArbiterState.DISABLED
    assert real.active_watchers == []
    real.emit(NEAR)
    assert len(arbiter.samples) == 0


@pytest.mark.asyncio
async def test_live_report_is_cancelled_with_real_subscription(caplog: pytest.LogCaptureFixture) -> None:
    real = FakeRealFeed(initial_fix=NEAR)
    arbiter = _arbiter(real, live_report_interval=0.01, loop=asyncio.get_running_loop())

    with caplog.at_level(logging.DEBUG, logger="pyplotfinder.location.arbiter"):
        arbiter.grant_consent()
        await asyncio.sleep(0.05)
        assert "Live position" in caplog.text

        arbiter.set_simulated(True)
        caplog.clear()
        await asyncio.sleep(0.05)
    assert "Live position" not in caplog.text
