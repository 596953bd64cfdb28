from datetime import date, datetime

from rechnung.constants import LOCAL_TZ


def today() -> date:
    return datetime.now(LOCAL_TZ).date()


def now_iso() -> str:
    return datetime.now(LOCAL_TZ).isoformat(timespec="seconds")
