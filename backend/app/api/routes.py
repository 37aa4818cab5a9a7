import json
from datetime import datetime, timedelta
from typing import Any

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from sqlalchemy.orm import Session

from app.api.deps import get_channel, get_ingest, get_registry
from app.core.config import settings
from app.core.database import get_db
from app.core.errors import NotFoundError, ValidationError
from app.core.security import Action, ensure_allowed, get_current_user
from app.crud import alert_crud, reading_crud, sensor_crud, station_crud
from app.models.enums import AlertStatus
from app.models.user import User
from app.schemas import (
    AlertCount,
    AlertOut,
    ReadingIn,
    ReadingOut,
    ReadingStatistics,
    SensorIn,
    SensorOut,
    SensorUpdate,
    StationIn,
    StationOut,
    StationUpdate,
)
from app.services import BroadcastChannel, ConnectionRegistry, ReadingIngest, dismiss_alert, resolve_alert
from app.services.broadcast import TOPICS
from app.utils.clock import as_utc, utcnow

router = APIRouter()
ws_router = APIRouter()

authenticated = [Depends(get_current_user)]


def _get_station_or_404(db: Session, station_id: int):
    station = station_crud.get(db, station_id)
    if station is None:
        raise NotFoundError("Station not found")
    return station


def _get_sensor_or_404(db: Session, sensor_id: int):
    sensor = sensor_crud.get(db, sensor_id)
    if sensor is None:
        raise NotFoundError("Sensor not found")
    return sensor


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# -- readings ----------------------------------------------------------------


@router.post("/readings", response_model=ReadingOut, status_code=201)
def create_reading(
    payload: ReadingIn,
    db: Session = Depends(get_db),
    ingest: ReadingIngest = Depends(get_ingest),
) -> ReadingOut:
    reading = ingest.ingest(db, payload)
    return ReadingOut.model_validate(reading)


@router.get("/readings", response_model=list[ReadingOut], dependencies=authenticated)
def get_readings(
    limit: int = Query(default=settings.readings_max_limit, ge=1, le=settings.readings_max_limit),
    db: Session = Depends(get_db),
) -> list[ReadingOut]:
    items = reading_crud.get_multi(db, limit=limit)
    return [ReadingOut.model_validate(item) for item in items]


@router.get("/readings/latest", response_model=list[ReadingOut], dependencies=authenticated)
def get_latest_readings(db: Session = Depends(get_db)) -> list[ReadingOut]:
    items = reading_crud.get_latest(db, limit=settings.readings_latest_limit)
    return [ReadingOut.model_validate(item) for item in items]


@router.get("/readings/station/{station_id}", response_model=list[ReadingOut], dependencies=authenticated)
def get_station_readings(
    station_id: int,
    limit: int = Query(default=settings.readings_default_limit, ge=1, le=settings.readings_max_limit),
    db: Session = Depends(get_db),
) -> list[ReadingOut]:
    items = reading_crud.get_by_station(db, station_id, limit=limit)
    return [ReadingOut.model_validate(item) for item in items]


@router.get("/readings/sensor/{sensor_id}", response_model=list[ReadingOut], dependencies=authenticated)
def get_sensor_readings(
    sensor_id: int,
    limit: int = Query(default=settings.readings_default_limit, ge=1, le=settings.readings_max_limit),
    db: Session = Depends(get_db),
) -> list[ReadingOut]:
    items = reading_crud.get_by_sensor(db, sensor_id, limit=limit)
    return [ReadingOut.model_validate(item) for item in items]


@router.get(
    "/readings/statistics/{sensor_id}",
    response_model=ReadingStatistics,
    dependencies=authenticated,
)
def get_reading_statistics(
    sensor_id: int,
    start: datetime | None = Query(default=None, alias="startDate"),
    end: datetime | None = Query(default=None, alias="endDate"),
    db: Session = Depends(get_db),
) -> ReadingStatistics:
    _get_sensor_or_404(db, sensor_id)
    end = as_utc(end) if end else utcnow()
    start = as_utc(start) if start else end - timedelta(hours=24)
    if start > end:
        raise ValidationError("start must not be after end")

    stats = reading_crud.get_statistics(db, sensor_id, start, end)
    return ReadingStatistics(sensor_id=sensor_id, start=start, end=end, **stats)


# -- alerts ------------------------------------------------------------------


@router.get("/alerts", response_model=list[AlertOut], dependencies=authenticated)
def get_alerts(
    status: AlertStatus | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[AlertOut]:
    alerts = alert_crud.get_multi(db, status=status)
    return [AlertOut.model_validate(alert) for alert in alerts]


@router.get("/alerts/count", response_model=AlertCount, dependencies=authenticated)
def get_active_alert_count(db: Session = Depends(get_db)) -> AlertCount:
    return AlertCount(count=alert_crud.count_active(db))


@router.get("/alerts/{alert_id}", response_model=AlertOut, dependencies=authenticated)
def get_alert(alert_id: int, db: Session = Depends(get_db)) -> AlertOut:
    alert = alert_crud.get(db, alert_id)
    if alert is None:
        raise NotFoundError("Alert not found")
    return AlertOut.model_validate(alert)


@router.patch("/alerts/{alert_id}/resolve", response_model=AlertOut)
def resolve(
    alert_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> AlertOut:
    return AlertOut.model_validate(resolve_alert(db, alert_id, current_user))


@router.patch("/alerts/{alert_id}/dismiss", response_model=AlertOut)
def dismiss(
    alert_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> AlertOut:
    return AlertOut.model_validate(dismiss_alert(db, alert_id, current_user))


# -- catalog -----------------------------------------------------------------


@router.post("/stations", response_model=StationOut, status_code=201)
def create_station(
    payload: StationIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    channel: BroadcastChannel = Depends(get_channel),
) -> StationOut:
    ensure_allowed(current_user, Action.MANAGE_CATALOG)
    station = StationOut.model_validate(station_crud.create(db, payload.model_dump()))
    channel.publish_station_update(station)
    return station


@router.get("/stations", response_model=list[StationOut], dependencies=authenticated)
def get_stations(db: Session = Depends(get_db)) -> list[StationOut]:
    return [StationOut.model_validate(item) for item in station_crud.get_multi(db)]


@router.get("/stations/{station_id}", response_model=StationOut, dependencies=authenticated)
def get_station(station_id: int, db: Session = Depends(get_db)) -> StationOut:
    return StationOut.model_validate(_get_station_or_404(db, station_id))


@router.patch("/stations/{station_id}", response_model=StationOut)
def update_station(
    station_id: int,
    payload: StationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    channel: BroadcastChannel = Depends(get_channel),
) -> StationOut:
    ensure_allowed(current_user, Action.MANAGE_CATALOG)
    station = _get_station_or_404(db, station_id)
    updated = StationOut.model_validate(station_crud.update(db, station, payload.model_dump(exclude_unset=True)))
    channel.publish_station_update(updated)
    return updated


@router.delete("/stations/{station_id}", response_model=StationOut)
def delete_station(
    station_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    channel: BroadcastChannel = Depends(get_channel),
) -> StationOut:
    ensure_allowed(current_user, Action.MANAGE_CATALOG)
    station = _get_station_or_404(db, station_id)
    removed = StationOut.model_validate(station)
    station_crud.remove(db, station)
    channel.publish_station_update(removed)
    return removed


@router.post("/sensors", response_model=SensorOut, status_code=201)
def create_sensor(
    payload: SensorIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SensorOut:
    ensure_allowed(current_user, Action.MANAGE_CATALOG)
    _get_station_or_404(db, payload.station_id)
    data = payload.model_dump()
    data["type"] = payload.type.value
    return SensorOut.model_validate(sensor_crud.create(db, data))


@router.get("/sensors", response_model=list[SensorOut], dependencies=authenticated)
def get_sensors(
    station_id: int | None = Query(default=None, alias="stationId"),
    db: Session = Depends(get_db),
) -> list[SensorOut]:
    return [SensorOut.model_validate(item) for item in sensor_crud.get_multi(db, station_id=station_id)]


@router.get("/sensors/{sensor_id}", response_model=SensorOut, dependencies=authenticated)
def get_sensor(sensor_id: int, db: Session = Depends(get_db)) -> SensorOut:
    return SensorOut.model_validate(_get_sensor_or_404(db, sensor_id))


@router.patch("/sensors/{sensor_id}", response_model=SensorOut)
def update_sensor(
    sensor_id: int,
    payload: SensorUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SensorOut:
    ensure_allowed(current_user, Action.MANAGE_CATALOG)
    sensor = _get_sensor_or_404(db, sensor_id)

    changes = payload.model_dump(exclude_unset=True)
    if changes.get("type") is not None:
        changes["type"] = payload.type.value

    min_value = changes.get("min_value", sensor.min_value)
    max_value = changes.get("max_value", sensor.max_value)
    if min_value is not None and max_value is not None and min_value >= max_value:
        raise ValidationError("minValue must be lower than maxValue")

    return SensorOut.model_validate(sensor_crud.update(db, sensor, changes))


@router.delete("/sensors/{sensor_id}", response_model=SensorOut)
def delete_sensor(
    sensor_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SensorOut:
    ensure_allowed(current_user, Action.MANAGE_CATALOG)
    sensor = _get_sensor_or_404(db, sensor_id)
    removed = SensorOut.model_validate(sensor)
    sensor_crud.remove(db, sensor)
    return removed


# -- live channel ------------------------------------------------------------


def _parse_live_message(raw: str) -> str:
    text = raw.strip()
    if text.startswith("{"):
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            return ""
        return str(data.get("event", "")) if isinstance(data, dict) else ""
    return text


def _handle_live_message(registry: ConnectionRegistry, websocket: WebSocket, raw: str) -> dict[str, Any]:
    event = _parse_live_message(raw)

    if event == "ping":
        return {"event": "pong"}

    if event.startswith("subscribe:"):
        topic = event.split(":", 1)[1]
        if topic in TOPICS:
            registry.subscribe(websocket, topic)
            return {"event": "subscribed", "topic": topic}

    return {"event": "error", "detail": f"Unsupported message: {event or raw[:64]}"}


@ws_router.websocket("/ws")
async def live_updates(websocket: WebSocket, registry: ConnectionRegistry = Depends(get_registry)) -> None:
    await websocket.accept()
    registry.connect(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                reply = {"event": "error", "detail": "Binary frames are not supported"}
            else:
                reply = _handle_live_message(registry, websocket, raw)
            await websocket.send_json(reply)
    except WebSocketDisconnect:
        pass
    finally:
        registry.disconnect(websocket)
