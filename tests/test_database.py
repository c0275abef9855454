import asyncio
from datetime import datetime, timedelta

from vitalsign.models import ExtractedRecord
from vitalsign.persistence.database import Database


def _record(hr="72", when=None):
    return ExtractedRecord(when or datetime(2024, 1, 1, 12, 0, 0), hr, "97", "120/80", "normal", 0.93)


def test_write_and_read_back(tmp_path):
    async def run():
        db = Database(str(tmp_path / "data" / "vitals.db"))
        assert await db.initialize()
        assert await db.write(_record("72"))
        assert await db.write(_record("75", datetime(2024, 1, 1, 12, 0, 5)))
        rows = await db.get_recent_vital_signs(limit=10)
        await db.close()
        return rows

    rows = asyncio.run(run())
    assert [r.hr for r in rows] == ["75", "72"]
    assert rows[1].abp == "120/80"
    assert rows[1].ecg_classification == "normal"
    assert rows[1].ecg_confidence == 0.93


def test_write_when_disconnected_fails(tmp_path):
    db = Database(str(tmp_path / "vitals.db"))
    assert not asyncio.run(db.write(_record()))


def test_health_check(tmp_path):
    async def run():
        db = Database(str(tmp_path / "vitals.db"))
        before = await db.health_check()
        await db.initialize()
        after = await db.health_check()
        await db.close()
        return before, after

    assert asyncio.run(run()) == (False, True)


def test_reconnect_restores_writes(tmp_path):
    async def run():
        db = Database(str(tmp_path / "vitals.db"))
        await db.initialize()
        await db.disconnect()
        ok = await db.reconnect(max_attempts=2, delay_ms=0)
        wrote = await db.write(_record())
        await db.close()
        return ok, wrote

    assert asyncio.run(run()) == (True, True)


def test_reconnect_gives_up(tmp_path):
    # A directory cannot be opened as a database file
    target = tmp_path / "not_a_file"
    target.mkdir()
    db = Database(str(target))
    assert not asyncio.run(db.reconnect(max_attempts=2, delay_ms=0))


def test_cleanup_removes_old_rows(tmp_path):
    async def run():
        db = Database(str(tmp_path / "vitals.db"))
        await db.initialize()
        await db.write(_record("70"))
        old = (datetime.now() - timedelta(days=40)).isoformat()
        await db._connection.execute("UPDATE vital_signs SET created_at = ?", (old,))
        await db._connection.commit()
        await db.write(_record("71"))
        deleted = await db.cleanup_old_vital_signs(days_to_keep=30)
        rows = await db.get_recent_vital_signs()
        await db.close()
        return deleted, rows

    deleted, rows = asyncio.run(run())
    assert deleted == 1
    assert [r.hr for r in rows] == ["71"]


def test_uncreatable_directory_reports_failure(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    db = Database(str(blocker / "sub" / "vitals.db"))

    assert not asyncio.run(db.initialize())
    assert not asyncio.run(db.reconnect(max_attempts=1, delay_ms=0))
    assert not db.is_connected
