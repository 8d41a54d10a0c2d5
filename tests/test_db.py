from __future__ import annotations

import datetime as dt
from zoneinfo import ZoneInfo

from sqlalchemy.orm import sessionmaker

from checkrunner.db import Base, make_engine
from checkrunner.models import EventDelivery
from checkrunner.timezone import _load_timezone, format_local


def test_in_memory_database_is_shared_between_sessions():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)
    with Session() as db:
        db.add(EventDelivery(build_id="mem-1", event_type="push"))
        db.commit()
    with Session() as db:
        assert db.query(EventDelivery).filter_by(build_id="mem-1").count() == 1


def test_unknown_timezone_falls_back_to_utc():
    tz, name = _load_timezone("Mars/Olympus_Mons")
    assert name == "UTC"
    assert tz == ZoneInfo("UTC")


def test_format_local():
    assert format_local(None) is None
    assert format_local(dt.datetime(2024, 5, 1, 12, 30)) == "2024-05-01T12:30:00+00:00"
    aware = dt.datetime(2024, 5, 1, 12, 30, tzinfo=ZoneInfo("Europe/Berlin"))
    assert format_local(aware) == "2024-05-01T10:30:00+00:00"
