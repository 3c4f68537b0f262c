from datetime import datetime, date, time, timedelta, timezone
from dateutil import tz

def now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

def to_local_date(dt_utc: datetime, local_tz: str, cutover_hhmm: str) -> date:
    tzinfo = tz.gettz(local_tz)
    loc = dt_utc.astimezone(tzinfo)
    hh, mm = cutover_hhmm.split(":"); cut = time(int(hh), int(mm))
    # If before cutover treat as previous local date
    if loc.timetz() < cut.replace(tzinfo=loc.tzinfo):
        loc = (loc - timedelta(days=1))
    return loc.date()

def today_local_iso(local_tz: str, cutover_hhmm: str = "00:00") -> str:
    return to_local_date(datetime.now(timezone.utc), local_tz, cutover_hhmm).isoformat()
