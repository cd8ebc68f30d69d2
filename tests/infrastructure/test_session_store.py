import json

from defcards.domain.models import SessionRecord
from defcards.infrastructure.session_store import JsonSessionStore, merge_records


def test_load_missing_file(tmp_path):
    assert JsonSessionStore(tmp_path / "sessions.json").load() == []


def test_save_creates_parents_and_loads_back(tmp_path):
    store = JsonSessionStore(tmp_path / "data" / "sessions.json")
    records = [
        SessionRecord("2024-03-10", 2, 3, 60),
        SessionRecord("2024-03-09", 1, 0, 10),
    ]
    store.save(records)

    loaded = store.load()
    assert [r.date for r in loaded] == ["2024-03-09", "2024-03-10"]
    assert loaded[1] == SessionRecord("2024-03-10", 2, 3, 60)


def test_save_never_moves_counters_backwards(tmp_path):
    store = JsonSessionStore(tmp_path / "sessions.json")
    store.save([SessionRecord("2024-03-10", new_cards_studied=5, review_cards_studied=1)])
    store.save([SessionRecord("2024-03-10", new_cards_studied=2, review_cards_studied=4)])

    [r] = store.load()
    assert (r.new_cards_studied, r.review_cards_studied) == (5, 4)


def test_load_reads_camel_case_and_skips_junk(tmp_path):
    path = tmp_path / "sessions.json"
    path.write_text(
        json.dumps(
            [
                {
                    "date": "2024-03-10",
                    "newCardsStudied": 3,
                    "reviewCardsStudied": 2,
                    "totalTime": 90,
                },
                {"no": "date"},
                "garbage",
                {"date": "2024-03-11", "new_cards_studied": "x"},
            ]
        )
    )
    loaded = JsonSessionStore(path).load()
    assert loaded == [
        SessionRecord("2024-03-10", 3, 2, 90),
        SessionRecord("2024-03-11", 0, 0, 0),
    ]


def test_corrupt_file_loads_empty(tmp_path, caplog):
    path = tmp_path / "sessions.json"
    path.write_text("{not json")
    assert JsonSessionStore(path).load() == []
    assert "Could not read" in caplog.text


def test_merge_records():
    merged = merge_records(
        [SessionRecord("2024-01-02", 1, 1, 1)],
        [SessionRecord("2024-01-01", 0, 2, 0), SessionRecord("2024-01-02", 3, 0, 0)],
    )
    assert merged == [SessionRecord("2024-01-01", 0, 2, 0), SessionRecord("2024-01-02", 3, 1, 1)]
