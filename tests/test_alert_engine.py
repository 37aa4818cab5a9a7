import threading
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from app.core import Base
from app.core.errors import ConcurrencyViolation
from app.crud import alert_crud, sensor_crud, station_crud
from app.models.alert import Alert
from app.models.enums import AlertStatus
from app.models.reading import Reading
from app.services.alert_engine import AlertEvaluator, BreachKind, detect_breach, first_present


def _sensor(**bounds):
    values = {"name": "pH", "unit": "pH", "min_value": None, "max_value": None, "alert_threshold": None}
    values.update(bounds)
    return SimpleNamespace(**values)


def _active_alerts(db, sensor_id):
    return db.execute(
        select(Alert).where(Alert.sensor_id == sensor_id, Alert.status == AlertStatus.ACTIVE.value)
    ).scalars().all()


class TestDetectBreach:
    def test_max_takes_precedence_over_threshold(self):
        breach = detect_breach(9.0, _sensor(min_value=6.5, max_value=8.5, alert_threshold=7.0))

        assert breach.kind is BreachKind.MAXIMUM
        assert breach.message == "pH exceeded maximum allowed value: 9 pH (max: 8.5 pH)"

    def test_below_minimum(self):
        breach = detect_breach(5.9, _sensor(min_value=6.5, max_value=8.5, alert_threshold=7.0))

        assert breach.kind is BreachKind.MINIMUM
        assert "below minimum allowed value" in breach.message

    def test_threshold_inside_operating_range(self):
        breach = detect_breach(7.2, _sensor(min_value=6.5, max_value=8.5, alert_threshold=7.0))

        assert breach.kind is BreachKind.THRESHOLD
        assert breach.message == "pH exceeded alert threshold: 7.2 pH (threshold: 7 pH)"

    def test_values_on_the_bounds_do_not_breach(self):
        sensor = _sensor(min_value=6.5, max_value=8.5, alert_threshold=8.5)

        assert detect_breach(6.5, sensor) is None
        assert detect_breach(8.5, sensor) is None

    def test_zero_is_a_configured_bound(self):
        breach = detect_breach(1.0, _sensor(max_value=0.0))

        assert breach is not None
        assert breach.kind is BreachKind.MAXIMUM


@pytest.mark.parametrize(
    "values, expected",
    [
        ((7.0, 8.5, 6.5), 7.0),
        ((None, 8.5, 6.5), 8.5),
        ((None, None, 6.5), 6.5),
        ((0.0, 8.5, None), 0.0),
        ((None, None, None), None),
    ],
)
def test_first_present(values, expected):
    assert first_present(*values) == expected


class TestEvaluate:
    def test_no_threshold_means_no_alert(self, db, make_sensor):
        sensor = make_sensor(alert_threshold=None)
        evaluator = AlertEvaluator()

        for value in (-1000.0, 0.0, 7.5, 1000.0):
            assert evaluator.evaluate(db, Reading(value=value), sensor) is None
        assert _active_alerts(db, sensor.id) == []

    def test_threshold_breach_records_threshold(self, db, ph_sensor):
        alert = AlertEvaluator().evaluate(db, Reading(value=7.2), ph_sensor)

        assert alert.status == AlertStatus.ACTIVE.value
        assert alert.threshold == 7.0
        assert alert.value == 7.2
        assert "alert threshold" in alert.message

    def test_max_breach_uses_configured_threshold(self, db, make_sensor):
        sensor = make_sensor(name="Water Temperature", unit="°C", min_value=20, max_value=28, alert_threshold=26)

        alert = AlertEvaluator().evaluate(db, Reading(value=30), sensor)

        assert "maximum" in alert.message
        assert alert.threshold == 26

    def test_max_breach_on_ph_sensor(self, db, ph_sensor):
        alert = AlertEvaluator().evaluate(db, Reading(value=9.0), ph_sensor)

        assert "maximum" in alert.message
        # threshold is resolved alertThreshold -> maxValue -> minValue
        assert alert.threshold == 7.0

    def test_no_breach(self, db, ph_sensor):
        assert AlertEvaluator().evaluate(db, Reading(value=6.9), ph_sensor) is None

    def test_active_alert_suppresses_new_alerts(self, db, ph_sensor):
        evaluator = AlertEvaluator()

        first = evaluator.evaluate(db, Reading(value=7.2), ph_sensor)
        second = evaluator.evaluate(db, Reading(value=9.5), ph_sensor)

        assert first is not None
        assert second is None
        assert len(_active_alerts(db, ph_sensor.id)) == 1

    def test_fresh_breach_after_resolution_opens_new_alert(self, db, ph_sensor):
        evaluator = AlertEvaluator()
        first = evaluator.evaluate(db, Reading(value=7.2), ph_sensor)
        alert_crud.set_status(db, first, {"status": AlertStatus.RESOLVED.value})

        second = evaluator.evaluate(db, Reading(value=7.4), ph_sensor)

        assert second is not None
        assert second.id != first.id

    def test_alerts_are_per_sensor(self, db, make_sensor):
        evaluator = AlertEvaluator()
        ph = make_sensor()
        other = make_sensor(name="pH 2")

        assert evaluator.evaluate(db, Reading(value=7.2), ph) is not None
        assert evaluator.evaluate(db, Reading(value=7.2), other) is not None


class TestActiveAlertGuard:
    def test_store_rejects_second_active_alert(self, db, ph_sensor):
        payload = {"sensor_id": ph_sensor.id, "message": "m", "value": 7.2, "threshold": 7.0}
        alert_crud.create_active(db, payload)

        with pytest.raises(ConcurrencyViolation):
            alert_crud.create_active(db, payload)
        assert len(_active_alerts(db, ph_sensor.id)) == 1

    def test_stale_existence_check_is_absorbed(self, db, ph_sensor, monkeypatch):
        evaluator = AlertEvaluator()
        assert evaluator.evaluate(db, Reading(value=7.2), ph_sensor) is not None

        # another process inserted after our check
        monkeypatch.setattr(alert_crud, "get_active_for_sensor", lambda *args, **kwargs: None)

        assert evaluator.evaluate(db, Reading(value=7.3), ph_sensor) is None
        assert len(_active_alerts(db, ph_sensor.id)) == 1

    def test_concurrent_breaches_open_one_alert(self, tmp_path):
        engine = create_engine(
            f"sqlite:///{tmp_path / 'concurrency.db'}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        Base.metadata.create_all(bind=engine)
        factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

        with factory() as setup:
            station = station_crud.create(setup, {"name": "S", "latitude": 0.0, "longitude": 0.0})
            sensor = sensor_crud.create(
                setup,
                {
                    "station_id": station.id,
                    "name": "pH",
                    "type": "pH",
                    "unit": "pH",
                    "min_value": 6.5,
                    "max_value": 8.5,
                    "alert_threshold": 7.0,
                },
            )

        evaluator = AlertEvaluator()
        barrier = threading.Barrier(8)
        results = []
        errors = []

        def worker(value):
            try:
                with factory() as session:
                    barrier.wait()
                    results.append(evaluator.evaluate(session, Reading(value=value), sensor))
            except Exception as exc:
                errors.append(exc)

        threads = [threading.Thread(target=worker, args=(7.5 + i / 10,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len([alert for alert in results if alert is not None]) == 1
        with factory() as check:
            assert len(_active_alerts(check, sensor.id)) == 1
        engine.dispose()
