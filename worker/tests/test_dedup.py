import threading

from business_ingest.etl import dedup
from business_ingest.models import BusinessDraft


def make_draft(name):
    return BusinessDraft(
        name=name,
        description=f"{name} - restaurants in Karachi",
        category="restaurants",
        address="Karachi, Pakistan",
        city="Karachi",
        country="Pakistan",
    )


def test_seen_place_ids_add_if_absent():
    seen = dedup.SeenPlaceIds()

    assert seen.add_if_absent("abc") is True
    assert seen.add_if_absent("abc") is False
    assert seen.add_if_absent("") is False
    assert seen.add_if_absent(None) is False
    assert "abc" in seen
    assert len(seen) == 1


def test_seen_place_ids_concurrent_inserts_accept_each_id_once():
    seen = dedup.SeenPlaceIds()
    accepted = []
    lock = threading.Lock()

    def worker():
        for index in range(200):
            if seen.add_if_absent(f"id-{index}"):
                with lock:
                    accepted.append(index)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(accepted) == list(range(200))
    assert len(seen) == 200


def test_filter_existing_removes_stored_names():
    lookups = []

    def lookup(names):
        lookups.append(set(names))
        return {"Kolachi"}

    candidates = [make_draft("Kolachi"), make_draft("BBQ Tonight"), make_draft("Kolachi")]
    result = dedup.filter_existing(candidates, lookup)

    assert [draft.name for draft in result] == ["BBQ Tonight"]
    assert lookups == [{"Kolachi", "BBQ Tonight"}]


def test_filter_existing_empty_input():
    def lookup(names):
        raise AssertionError("lookup should not run")

    assert dedup.filter_existing([], lookup) == []
    assert dedup.filter_existing([make_draft("")], lookup) == []


def test_filter_existing_is_permissive_on_lookup_failure(caplog):
    def lookup(names):
        raise RuntimeError("database unavailable")

    candidates = [make_draft("Kolachi"), make_draft("BBQ Tonight")]
    with caplog.at_level("ERROR"):
        result = dedup.filter_existing(candidates, lookup)

    assert result == candidates
    assert "Error checking duplicates" in " ".join(caplog.messages)


def test_filter_existing_defaults_to_database_lookup(monkeypatch):
    monkeypatch.setattr(dedup.db, "find_existing_names", lambda names: {"BBQ Tonight"})
    result = dedup.filter_existing([make_draft("Kolachi"), make_draft("BBQ Tonight")])
    assert [draft.name for draft in result] == ["Kolachi"]
