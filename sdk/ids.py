
from __future__ import annotations
import time, ulid
from datetime import datetime, timezone
MS_PER_S = 1000
def now_utc_ms() -> int: return time.time_ns() // 1_000_000
def iso_utc(ts_ms: int) -> str: return datetime.fromtimestamp(ts_ms / MS_PER_S, tz=timezone.utc).isoformat()
def new_ulid() -> str: return str(ulid.new())
