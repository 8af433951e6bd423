import json
import enum
from datetime import date, datetime, time
from decimal import Decimal


class ScheduleEncoder(json.JSONEncoder):
    """
    JSON encoder for audit details and API payloads
    Handles money values, schedule timestamps and status enums
    """
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (datetime, date, time)):
            return obj.isoformat()
        if isinstance(obj, enum.Enum):
            return obj.value
        return super(ScheduleEncoder, self).default(obj)
