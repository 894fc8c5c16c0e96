import json, time, uuid, datetime as dt
import logging
import sqlite3
import sys
from sqlite3 import Connection
from typing import Optional

from .config import get_log_level

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_configured = False

logger = logging.getLogger(__name__)

DDL = """
CREATE TABLE IF NOT EXISTS operation_log (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  ts TEXT NOT NULL,
  user TEXT NOT NULL,
  action TEXT NOT NULL,
  entity_type TEXT,
  entity_id TEXT,
  request_id TEXT,
  payload_json TEXT,
  after_json TEXT,
  result TEXT,
  err_msg TEXT,
  latency_ms INTEGER
);
CREATE INDEX IF NOT EXISTS idx_log_ts ON operation_log(ts);
CREATE INDEX IF NOT EXISTS idx_log_action ON operation_log(action);
"""


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once (stderr, pipe-separated lines)."""
    global _configured
    if _configured:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    root = logging.getLogger()
    root.setLevel(level or get_log_level())
    root.addHandler(handler)
    _configured = True


def ensure_log_schema(conn: Connection):
    conn.executescript(DDL)


def insert_log(conn: Connection, rec: dict):
    conn.execute(
        """INSERT INTO operation_log
        (ts,user,action,entity_type,entity_id,request_id,payload_json,after_json,result,err_msg,latency_ms)
        VALUES(:ts,:user,:action,:entity_type,:entity_id,:request_id,:payload_json,:after_json,:result,:err_msg,:latency_ms)""",
        rec,
    )


class LogContext:
    """Collects one operation's audit record; `write` persists it through the store's connection."""

    def __init__(self, action: str, user: str = "anonymous"):
        self.action = action
        self.user = user
        self.request_id = str(uuid.uuid4())
        self.start = time.perf_counter()
        self.after = None
        self.payload = None
        self.entity_type = None
        self.entity_id = None

    def set_entity(self, etype: str, eid: str):
        self.entity_type = etype
        self.entity_id = eid

    def set_after(self, obj): self.after = obj
    def set_payload(self, obj): self.payload = obj

    def write(self, store, result: str = "OK", err: Optional[str] = None):
        elapsed_ms = int((time.perf_counter() - self.start) * 1000)
        rec = {
            "ts": dt.datetime.now(dt.timezone.utc).isoformat(),
            "user": self.user,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "request_id": self.request_id,
            "payload_json": json.dumps(self.payload, ensure_ascii=False) if self.payload is not None else None,
            "after_json": json.dumps(self.after, ensure_ascii=False) if self.after is not None else None,
            "result": result,
            "err_msg": err,
            "latency_ms": elapsed_ms,
        }
        if result == "OK":
            logger.info("%s ok request_id=%s latency_ms=%d", self.action, self.request_id, elapsed_ms)
        else:
            logger.warning("%s %s request_id=%s err=%s", self.action, result, self.request_id, err)
        # the audit row never overrides the result of the operation it describes
        try:
            with store.connection() as conn:
                insert_log(conn, rec)
        except sqlite3.Error:
            logger.exception("operation_log write failed for %s request_id=%s", self.action, self.request_id)


def search_logs(conn: Connection, q: str | None, action: str | None, page: int, size: int):
    where = []
    params = {}
    if q:
        where.append("(payload_json LIKE :q OR after_json LIKE :q OR err_msg LIKE :q)")
        params["q"] = f"%{q}%"
    if action:
        where.append("action = :action")
        params["action"] = action
    wh = " WHERE " + " AND ".join(where) if where else ""
    sql = f"SELECT * FROM operation_log{wh} ORDER BY id DESC LIMIT :limit OFFSET :offset"
    count_sql = f"SELECT COUNT(1) AS cnt FROM operation_log{wh}"
    total = conn.execute(count_sql, params).fetchone()["cnt"]
    rows = conn.execute(sql, {**params, "limit": size, "offset": (page - 1) * size}).fetchall()
    return total, [dict(r) for r in rows]
