# cortexmem

A persistent memory store for AI coding agents. Observations (decisions,
patterns, bug fixes, discoveries), sessions, user prompts and search feedback
are kept in a local SQLite database with full-text indexes, so an agent can
recall what happened in earlier sessions of a project.

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## Where data lives

The database path is taken from the `CORTEXMEM_DB` environment variable
(`cortexmem.paths.db_path`). When it is not set, the database is
`cortexmem.db` inside the `cortexmem` user data directory of the platform.
The directory is created when the database is opened.

Settings are read by `cortexmem.config.Config.load` from `config.toml` in the
`cortexmem` user config directory:

```toml
[embedding]
model = "AllMiniLML6V2"
```

Recognised model names are `AllMiniLML6V2`, `BGESmallENV15` and
`AllMiniLML12V2`. An unknown name, an unreadable file or invalid TOML falls
back to the defaults.

## Command line

Show an observation in full:

```
cortexmem get 42
```

Show counts of active observations by tier and by type:

```
cortexmem stats
```

Delete an observation (soft delete by default; `--hard` removes the row, its
full-text entry and its vector):

```
cortexmem delete 42
cortexmem delete 42 --hard
```

Log a user prompt and list the most recent ones (the project defaults to the
name of the current directory):

```
cortexmem save-prompt "Refactor the session handling" --project myapp
cortexmem recent-prompts --project myapp --limit 10
```

Export to JSON (default file `cortexmem-export.json`) and import it back:

```
cortexmem export --output memories.json --project myapp
cortexmem import memories.json
cortexmem import memories.json --replace
```

Importing merges by content hash: observations whose content is already stored
are skipped. `--replace` asks for confirmation, then clears all observations,
their full-text index and all sessions before importing.

Add a `cortexmem` MCP server entry to an agent's configuration file
(Claude Code, OpenCode, Cursor, Windsurf, VS Code, Gemini CLI, Zed or Cline):

```
cortexmem setup
```

The wizard lists the agents whose configuration directory exists, asks which
one to configure, writes the entry (asking before overwriting an existing
one) and checks that `cortexmem --version` runs.

Run `cortexmem --help` for the full list of commands and options.

## Python API

```python
from cortexmem.db.database import Database
from cortexmem.db.observations import NewObservation
from cortexmem.protocol import format_full

db = Database.open_in_memory()
obs_id = db.insert_observation(
    NewObservation(
        project="myapp",
        title="Use WAL mode",
        content="Enable WAL journaling for concurrent readers.",
        obs_type="decision",
        concepts=["sqlite", "wal"],
        topic_key="decision/use-wal-mode",
    )
)
db.sync_observation_to_fts(obs_id)

print(format_full(db.get_observation(obs_id)))
for hit in db.search_fts("journaling", "myapp", 10):
    print(hit.rowid, hit.rank)
db.close()
```

`Database` also works as a context manager. Saving through
`upsert_observation` with a `topic_key` that already exists in the project
updates that observation in place and bumps its revision count instead of
creating a new one.

Other parts of `Database`:

- sessions: `create_session`, `end_session`, `get_session`,
  `get_latest_session`, `set_session_summary`;
- prompts: `insert_prompt`, `get_recent_prompts`, `search_prompts`;
- search feedback: `record_search_feedback`, `get_feedback_count`;
- vectors: `insert_vector`, `delete_vector`, `search_vector` (384-dimension
  float32 embeddings, ranked by Euclidean distance);
- sync journal: `insert_sync_mutation`, `list_unacked_mutations`,
  `ack_mutations`, `update_sync_state`, `get_sync_state`, `record_sync_chunk`;
- housekeeping: `get_meta`, `set_meta`, `schema_version`, `count_active`,
  `count_by_tier`, `count_by_type`, `get_timeline`, `backdate_observation`.

`cortexmem.protocol` renders observations, prompts and statistics as plain
text; `cortexmem.embed.build_search_text` builds the text an observation would
be embedded from; `cortexmem.export` holds `ExportData`, `export_data`,
`import_data`, `run_export` and `run_import`.

## What this package does not do

- It does not run an MCP server or an HTTP API; the entry written by
  `cortexmem setup` refers to a `cortexmem mcp` command that this package does
  not provide.
- It does not load or download embedding models and computes no embeddings;
  vectors must be supplied by the caller. There is no hybrid (full-text plus
  vector) search and no compaction of tiers.
- The command line has no command for saving observations; use the Python API.
- The sync tables are storage only: there is no git or cloud synchronisation.
- There is no interactive dashboard and no diagnostics command.