"""JSON encoding shared by HTTP responses and the event stream."""

from __future__ import annotations

import datetime
import json
from decimal import Decimal
from typing import Any

from fastapi.responses import JSONResponse


class AppJSONEncoder(json.JSONEncoder):
  """Encoder that also handles Decimal and datetime values from the database."""

  def default(self, obj: Any) -> Any:
    if isinstance(obj, Decimal):
      return int(obj) if obj % 1 == 0 else float(obj)
    if isinstance(obj, datetime.datetime | datetime.date):
      return obj.isoformat()
    return super().default(obj)


def dumps(content: Any) -> str:
  """Compact JSON with non-ASCII characters kept as-is."""
  return json.dumps(content, ensure_ascii=False, allow_nan=False, indent=None, separators=(",", ":"), cls=AppJSONEncoder)


class AppJSONResponse(JSONResponse):
  """JSONResponse that uses AppJSONEncoder."""

  def render(self, content: Any) -> bytes:
    return dumps(content).encode("utf-8")
