from cortexmem.db.database import Database
from cortexmem.db.prompts import Prompt


def test_insert_and_recent():
    with Database.open_in_memory() as db:
        pid = db.insert_prompt(None, "fix the login bug", "alpha")
        prompts = db.get_recent_prompts("alpha", 10)
    assert len(prompts) == 1
    assert isinstance(prompts[0], Prompt)
    assert (prompts[0].id, prompts[0].content, prompts[0].project) == (
        pid,
        "fix the login bug",
        "alpha",
    )
    assert prompts[0].session_id is None


def test_recent_newest_first_and_limited():
    with Database.open_in_memory() as db:
        ids = [db.insert_prompt(None, f"prompt {n}", "alpha") for n in range(5)]
        recent = db.get_recent_prompts("alpha", 3)
    assert [p.id for p in recent] == list(reversed(ids))[:3]


def test_recent_filters_by_project():
    with Database.open_in_memory() as db:
        db.insert_prompt(None, "one", "alpha")
        db.insert_prompt(None, "two", "beta")
        db.insert_prompt(None, "three", None)
        assert [p.content for p in db.get_recent_prompts("beta", 10)] == ["two"]
        assert len(db.get_recent_prompts(None, 10)) == 3


def test_search_finds_matching_prompt():
    with Database.open_in_memory() as db:
        db.insert_prompt(None, "refactor the database layer", "alpha")
        db.insert_prompt(None, "write documentation", "alpha")
        results = db.search_prompts("database", None, 10)
    assert [p.content for p in results] == ["refactor the database layer"]


def test_search_respects_project():
    with Database.open_in_memory() as db:
        db.insert_prompt(None, "deploy service", "alpha")
        db.insert_prompt(None, "deploy website", "beta")
        results = db.search_prompts("deploy", "beta", 10)
    assert [p.project for p in results] == ["beta"]


def test_search_no_match():
    with Database.open_in_memory() as db:
        db.insert_prompt(None, "something", "alpha")
        assert db.search_prompts("nothingmatches", None, 10) == []


def test_session_id_is_stored():
    with Database.open_in_memory() as db:
        db.conn.execute("INSERT INTO sessions (project, directory) VALUES ('alpha', '/d')")
        sid = db.conn.execute("SELECT MAX(id) FROM sessions").fetchone()[0]
        db.insert_prompt(sid, "hello", "alpha")
        assert db.get_recent_prompts("alpha", 1)[0].session_id == sid