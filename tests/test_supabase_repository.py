"""
SupabaseItineraryRepository against a small fake of the supabase-py query
builder. The fake keeps rows in memory and understands the handful of calls
the repository makes.
"""

import uuid
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from itinerary_studio.core.errors import ConflictError, ItineraryNotFoundError, PersistenceError
from itinerary_studio.db.repository import SupabaseItineraryRepository
from itinerary_studio.logic.comments import build_client_comment
from itinerary_studio.logic.generator import generate_itinerary
from itinerary_studio.models.itinerary import CommentStatus, ItineraryDay
from itinerary_studio.services.itinerary_service import ItineraryService


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = None
        self.payload = None
        self.filters = []
        self.order_by = None
        self.desc = False
        self.limit_n = None

    def select(self, columns="*"):
        self.op = "select"
        return self

    def insert(self, rows):
        self.op = "insert"
        self.payload = rows if isinstance(rows, list) else [rows]
        return self

    def update(self, values):
        self.op = "update"
        self.payload = values
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.order_by, self.desc = column, desc
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    def _matching(self):
        return [row for row in self.db.tables[self.table] if all(f(row) for f in self.filters)]

    def execute(self):
        key = (self.table, self.op)
        self.db.calls.append(key)
        if key in self.db.hooks:
            self.db.hooks.pop(key)(self.db)
        if key in self.db.failures:
            # failures are one-shot
            self.db.failures.discard(key)
            raise RuntimeError(f"{self.table} {self.op} rejected")

        rows = self.db.tables[self.table]
        if self.op == "insert":
            inserted = [self.db.stamp(dict(r)) for r in self.payload]
            rows.extend(inserted)
            return SimpleNamespace(data=[dict(r) for r in inserted])
        if self.op == "update":
            matched = self._matching()
            for row in matched:
                row.update(self.payload)
            return SimpleNamespace(data=[dict(r) for r in matched])
        if self.op == "delete":
            matched = self._matching()
            self.db.tables[self.table] = [r for r in rows if r not in matched]
            if self.table == "itineraries":
                ids = {r["id"] for r in matched}
                for child in ("itinerary_days", "itinerary_comments"):
                    self.db.tables[child] = [r for r in self.db.tables[child] if r["itinerary_id"] not in ids]
            return SimpleNamespace(data=[dict(r) for r in matched])

        result = self._matching()
        if self.order_by:
            result = sorted(result, key=lambda r: r[self.order_by], reverse=self.desc)
        if self.limit_n is not None:
            result = result[: self.limit_n]
        return SimpleNamespace(data=[dict(r) for r in result])


class FakeSupabase:
    def __init__(self):
        self.tables = {"itineraries": [], "itinerary_days": [], "itinerary_comments": []}
        self.calls = []
        self.failures = set()
        self.hooks = {}
        self._clock = datetime(2024, 5, 1, tzinfo=timezone.utc)

    def stamp(self, row):
        # monotonically increasing timestamps so ordering is deterministic
        self._clock += timedelta(seconds=1)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", self._clock.isoformat())
        row.setdefault("updated_at", self._clock.isoformat())
        return row

    def table(self, name):
        return FakeQuery(self, name)


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def repo(db):
    return SupabaseItineraryRepository(db)


@pytest.fixture
def saved(repo, paris_settings):
    return repo.insert_itinerary(generate_itinerary(paris_settings))


def test_insert_and_load(repo, db, saved):
    assert saved.share_token
    assert len(db.tables["itinerary_days"]) == 3

    loaded = repo.get_itinerary(saved.id)

    assert loaded.title == "Paris Cultural & Adventure Experience"
    assert [d.day for d in loaded.days] == [1, 2, 3]
    assert loaded.days[0].date == date(2024, 6, 1)
    assert loaded.flights.return_flight == saved.flights.return_flight
    assert loaded.consultant.email == saved.consultant.email
    assert loaded.accommodation.nights == 2
    assert repo.get_by_share_token(saved.share_token).id == saved.id


def test_failed_days_insert_removes_itinerary(repo, db, paris_settings):
    db.failures.add(("itinerary_days", "insert"))

    with pytest.raises(PersistenceError):
        repo.insert_itinerary(generate_itinerary(paris_settings))

    assert db.tables["itineraries"] == []


def test_unknown_share_token(repo, saved):
    assert repo.get_by_share_token("not-a-token") is None
    assert repo.get_itinerary("missing") is None


def test_list_is_newest_first_and_batched(repo, db, paris_settings, saved):
    rome = repo.insert_itinerary(generate_itinerary(paris_settings.model_copy(update={"destination": "Rome"})))
    repo.insert_comments(rome.id, [build_client_comment("general", "Love it")])
    db.calls.clear()

    listed = repo.list_itineraries()

    assert [i.id for i in listed] == [rome.id, saved.id]
    assert [len(i.comments) for i in listed] == [1, 0]
    assert all(len(i.days) == 3 for i in listed)
    assert db.calls.count(("itinerary_days", "select")) == 1
    assert db.calls.count(("itinerary_comments", "select")) == 1


def test_update_bumps_version(repo, saved):
    updated = repo.update_itinerary(saved.id, {"title": "Paris in June", "hotel_name": "Le Meurice"}, expected_version=1)

    assert updated.version == 2
    assert updated.title == "Paris in June"
    assert updated.accommodation.hotel == "Le Meurice"


def test_update_with_stale_version(repo, db, saved):
    repo.update_itinerary(saved.id, {"title": "First"})
    db.calls.clear()

    with pytest.raises(ConflictError):
        repo.update_itinerary(saved.id, {"title": "Second"}, expected_version=1)

    assert ("itineraries", "update") not in db.calls
    assert repo.get_itinerary(saved.id).title == "First"


def test_concurrent_write_between_read_and_update(repo, db, saved):
    def someone_else_writes(fake):
        fake.tables["itineraries"][0]["version"] += 1

    db.hooks[("itineraries", "update")] = someone_else_writes

    with pytest.raises(ConflictError):
        repo.update_itinerary(saved.id, {"title": "Mine"}, expected_version=1)


def test_update_missing_itinerary(repo):
    with pytest.raises(ItineraryNotFoundError):
        repo.update_itinerary("missing", {"title": "x"})


def test_update_with_days_restores_on_failure(repo, db, saved):
    db.failures.add(("itinerary_days", "insert"))
    new_days = [
        ItineraryDay(day=1, date=date(2024, 6, 1), title="Arrival", city="Paris"),
        ItineraryDay(day=2, date=date(2024, 6, 2), title="Departure", city="Paris"),
    ]

    with pytest.raises(PersistenceError):
        repo.update_itinerary(saved.id, {"end_date": "2024-06-03"}, days=new_days)

    reloaded = repo.get_itinerary(saved.id)
    assert [d.title for d in reloaded.days] == [d.title for d in saved.days]
    assert reloaded.end_date == date(2024, 6, 4)
    assert reloaded.version == 1


def test_update_with_days(repo, saved):
    new_days = [
        ItineraryDay(day=1, date=date(2024, 6, 1), title="Arrival", city="Paris"),
        ItineraryDay(day=2, date=date(2024, 6, 2), title="Versailles", city="Versailles"),
    ]

    updated = repo.update_itinerary(saved.id, {"end_date": "2024-06-03"}, expected_version=1, days=new_days)

    assert [d.title for d in updated.days] == ["Arrival", "Versailles"]
    assert updated.end_date == date(2024, 6, 3)
    assert updated.version == 2


def test_conflict_puts_previous_days_back(repo, db, saved):
    def someone_else_writes(fake):
        fake.tables["itineraries"][0]["version"] += 1

    db.hooks[("itineraries", "update")] = someone_else_writes
    new_days = [ItineraryDay(day=i, date=date(2024, 6, i), title=f"New {i}", city="Paris") for i in (1, 2, 3)]

    with pytest.raises(ConflictError):
        repo.update_itinerary(saved.id, {"title": "Mine"}, days=new_days)

    assert [d.title for d in repo.get_itinerary(saved.id).days] == [d.title for d in saved.days]


def test_comments(repo, saved):
    inserted = repo.insert_comments(saved.id, [build_client_comment("flights", "Earlier flight?")])
    comment_id = inserted[0].id

    repo.update_comment_status(comment_id, CommentStatus.ADDRESSED)

    assert repo.get_itinerary(saved.id).comments[0].status == CommentStatus.ADDRESSED
    with pytest.raises(ItineraryNotFoundError):
        repo.update_comment_status("missing", CommentStatus.RESOLVED)


def test_delete_cascades(repo, db, saved):
    repo.insert_comments(saved.id, [build_client_comment("general", "Hi")])

    repo.delete_itinerary(saved.id)

    assert db.tables["itinerary_days"] == []
    assert db.tables["itinerary_comments"] == []
    with pytest.raises(ItineraryNotFoundError):
        repo.delete_itinerary(saved.id)


def test_backend_errors_become_persistence_errors(repo, db):
    db.failures.add(("itineraries", "select"))

    with pytest.raises(PersistenceError) as exc_info:
        repo.list_itineraries()

    assert exc_info.value.detail == "Failed to load itineraries."
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_consultant_email_is_free_text(repo, db, saved):
    db.tables["itineraries"][0]["consultant_email"] = "sarah (at) agency"
    service = ItineraryService(repo, public_base_url="https://studio.test")

    shared = service.get_by_share_token(saved.share_token)

    assert shared.id == saved.id
    assert shared.consultant.email == "sarah (at) agency"


def test_unreadable_row_is_a_persistence_error(repo, db, saved):
    db.tables["itineraries"][0]["travelers"] = 0
    service = ItineraryService(repo, public_base_url="https://studio.test")

    with pytest.raises(PersistenceError):
        repo.get_itinerary(saved.id)
    assert service.get_by_share_token(saved.share_token) is None
