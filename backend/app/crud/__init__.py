from app.crud.crud_alert import alert_crud
from app.crud.crud_reading import reading_crud
from app.crud.crud_sensor import sensor_crud
from app.crud.crud_station import station_crud
from app.crud.crud_user import user_crud

__all__ = ["alert_crud", "reading_crud", "sensor_crud", "station_crud", "user_crud"]
