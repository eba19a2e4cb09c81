from app.models.list_display import ListDisplaySetting
from app.models.number_format import NumberFormatSetting
from app.models.org import Org
from app.models.serial_counter import SerialCounter

__all__ = [
    "ListDisplaySetting",
    "NumberFormatSetting",
    "Org",
    "SerialCounter",
]
