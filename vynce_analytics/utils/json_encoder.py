"""Custom JSON encoding utilities"""
import json
from dataclasses import asdict, is_dataclass
from datetime import date, datetime

from pydantic import BaseModel

class AnalyticsEncoder(json.JSONEncoder):
    """JSON encoder for datetimes, dataclass records and pydantic models"""
    def default(self, obj):
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode='json', by_alias=True)
        if is_dataclass(obj) and not isinstance(obj, type):
            return asdict(obj)
        return super().default(obj)

def json_dumps(obj, **kwargs) -> str:
    """Helper function to dump JSON with datetime and model handling"""
    return json.dumps(obj, cls=AnalyticsEncoder, ensure_ascii=False, **kwargs)
