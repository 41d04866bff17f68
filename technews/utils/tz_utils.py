import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Callable, Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def struct_to_utc(value: time.struct_time) -> datetime:
    """feedparser entrega *_parsed já normalizado para UTC."""
    return datetime(*value[:6], tzinfo=timezone.utc)


def _parse_raw_date(raw: str) -> Optional[datetime]:
    # RSS usa RFC 822; Atom usa ISO-8601
    try:
        return parsedate_to_datetime(raw)
    except (TypeError, ValueError, IndexError):
        pass
    try:
        return datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_pub_date(
    raw: Optional[str],
    parsed: Optional[time.struct_time] = None,
    now: Callable[[], datetime] = utc_now,
) -> datetime:
    """
    Converte a data de publicação para datetime UTC.
    Prioridade: struct_time do feedparser -> string bruta -> agora.
    """
    if parsed:
        try:
            return struct_to_utc(parsed)
        except (TypeError, ValueError):
            pass
    if raw:
        dt = _parse_raw_date(raw)
        if dt is not None:
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            return dt.astimezone(timezone.utc)
    return now()


def iso_to_utc(iso_ts: str) -> datetime:
    """ISO string -> datetime UTC; strings inválidas vão para o início da época (fim da lista)."""
    try:
        dt = datetime.fromisoformat(iso_ts)
    except (TypeError, ValueError):
        return datetime.fromtimestamp(0, tz=timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
