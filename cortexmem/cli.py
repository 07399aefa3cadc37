"""Command-line interface for the memory store."""

from __future__ import annotations

import argparse
import json
import logging
import sqlite3
import subprocess
import sys
from collections.abc import Sequence
from enum import Enum
from pathlib import Path

from cortexmem.db.observations import Observation
from cortexmem.db.prompts import Prompt
from cortexmem.export import PACKAGE_VERSION, run_export, run_import
from cortexmem.paths import detect_project, open_database

DEFAULT_RECENT_PROMPTS = 10


def run_get(id: int) -> Observation | None:
    """Print the full observation with this id and return it, or None if absent."""
    with open_database() as db:
        obs = db.get_observation(id)
    if obs is None:
        print(f"Observation {id} not found.")
        return None
    print(f"# {obs.title} (id: {obs.id})")
    print(f"Type: {obs.obs_type} | Tier: {obs.tier} | Scope: {obs.scope}")
    if obs.concepts:
        print(f"Concepts: {', '.join(obs.concepts)}")
    if obs.facts:
        print(f"Facts: {'; '.join(obs.facts)}")
    print(f"Accesses: {obs.access_count} | Revisions: {obs.revision_count}")
    print(f"Created: {obs.created_at} | Updated: {obs.updated_at}")
    print(f"\n{obs.content}")
    return obs


def run_stats() -> int:
    """Print counts of live observations by tier and type; returns the total."""
    with open_database() as db:
        total = db.count_active(None)
        by_tier = db.count_by_tier(None)
        by_type = db.count_by_type(None)
    print(f"Total observations: {total}")
    print("\nBy tier:")
    for tier, count in by_tier:
        print(f"  {tier}: {count}")
    print("\nBy type:")
    for obs_type, count in by_type:
        print(f"  {obs_type}: {count}")
    return total


def run_save_prompt(content: str, project: str | None = None) -> int:
    """Log a user prompt for *project* (default: the current directory) and return its id."""
    project = project if project is not None else detect_project()
    with open_database() as db:
        prompt_id = db.insert_prompt(None, content, project)
    print(f"Prompt saved: id={prompt_id}")
    return prompt_id


def run_recent_prompts(
    project: str | None = None, limit: int = DEFAULT_RECENT_PROMPTS
) -> list[Prompt]:
    """Print and return the newest prompts of *project* (default: the current directory)."""
    project = project if project is not None else detect_project()
    with open_database() as db:
        prompts = db.get_recent_prompts(project, limit)
    if not prompts:
        print("No prompts found.")
        return []
    for p in prompts:
        print(f"[{p.id}] {p.created_at} — {p.content}")
    return prompts


def _run_delete(id: int, hard: bool) -> None:
    with open_database() as db:
        if hard:
            db.remove_from_fts(id)
            db.delete_vector(id)
            db.hard_delete(id)
            print(f"Observation {id} permanently deleted.")
        else:
            db.soft_delete(id)
            db.remove_from_fts(id)
            print(f"Observation {id} soft-deleted.")


# ── Agent setup wizard ──────────────────────────────────────────


class _Agent(Enum):
    CLAUDE_CODE = "Claude Code"
    OPEN_CODE = "OpenCode"
    CURSOR = "Cursor"
    WINDSURF = "Windsurf"
    VS_CODE = "VS Code"
    GEMINI_CLI = "Gemini CLI"
    ZED = "Zed"
    CLINE = "Cline"

    def __str__(self) -> str:
        return self.value

    def config_path(self) -> Path:
        home = Path.home()
        match self:
            case _Agent.CLAUDE_CODE:
                return home / ".claude" / "settings.json"
            case _Agent.OPEN_CODE:
                return home / ".config" / "opencode" / "config.json"
            case _Agent.CURSOR:
                return home / ".cursor" / "mcp.json"
            case _Agent.WINDSURF:
                return home / ".codeium" / "windsurf" / "mcp_config.json"
            case _Agent.VS_CODE:
                return Path.cwd() / ".vscode" / "mcp.json"
            case _Agent.GEMINI_CLI:
                return home / ".gemini" / "settings.json"
            case _Agent.ZED:
                return home / ".config" / "zed" / "settings.json"
            case _Agent.CLINE:
                return Path.cwd() / ".vscode" / "cline_mcp_settings.json"
        raise ValueError(f"Unknown agent: {self}")


def _detect_agents() -> list[tuple[_Agent, bool]]:
    return [
        (agent, agent.config_path().exists() or agent.config_path().parent.exists())
        for agent in _Agent
    ]


def _confirm(prompt: str) -> bool:
    return input(f"{prompt} [y/N] ").strip().lower() in {"y", "yes"}


def _write_mcp_config(agent: _Agent) -> None:
    path = agent.config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    config: object = {}
    if path.exists():
        try:
            config = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            config = {}
    if not isinstance(config, dict):
        raise ValueError("Config is not a JSON object")
    servers = config.setdefault("mcpServers", {})
    if not isinstance(servers, dict):
        raise ValueError("mcpServers is not a JSON object")
    if "cortexmem" in servers and not _confirm(
        "cortexmem is already configured. Overwrite?"
    ):
        print("Skipped MCP config (already exists).")
        return
    servers["cortexmem"] = {"command": "cortexmem", "args": ["mcp"], "type": "stdio"}
    path.write_text(json.dumps(config, indent=2), encoding="utf-8")
    print(f"MCP config written to {path}")


def _verify_binary() -> str | None:
    try:
        done = subprocess.run(
            ["cortexmem", "--version"], capture_output=True, text=True, check=False
        )
    except OSError:
        return None
    if done.returncode != 0:
        return None
    return done.stdout.strip()


def _choose_agent() -> _Agent:
    agents = list(_Agent)
    for number, agent in enumerate(agents, start=1):
        print(f"  {number}. {agent}")
    answer = input("Which AI agent do you use? [1] ").strip()
    if not answer:
        return agents[0]
    try:
        choice = int(answer)
    except ValueError:
        raise ValueError(f"Invalid selection: {answer}") from None
    if not 1 <= choice <= len(agents):
        raise ValueError(f"Invalid selection: {answer}")
    return agents[choice - 1]


def _run_setup() -> None:
    print("cortexmem setup\n")
    detected = _detect_agents()
    if any(found for _, found in detected):
        print("Detected agents:")
        for agent, found in detected:
            if found:
                print(f"  - {agent} (config found)")
        missing = [str(agent) for agent, found in detected if not found]
        if missing:
            print(f"\nNot detected: {', '.join(missing)}")
        print()

    agent = _choose_agent()
    print(f"\nConfiguring cortexmem for {agent}...\n")
    _write_mcp_config(agent)

    print("\nVerifying cortexmem binary...")
    version = _verify_binary()
    if version is None:
        print("  Warning: could not verify cortexmem binary in PATH")
    else:
        print(f"  Verified: {version}")
    print(f"\nSetup complete! Restart {agent} to activate cortexmem.")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cortexmem", description="Persistent vector memory for AI coding agents"
    )
    parser.add_argument("--version", action="version", version=f"cortexmem {PACKAGE_VERSION}")
    sub = parser.add_subparsers(dest="command", required=True)

    get = sub.add_parser("get", help="Get full observation by ID")
    get.add_argument("id", type=int)

    sub.add_parser("stats", help="Show database statistics")

    export = sub.add_parser("export", help="Export all memories to a JSON file")
    export.add_argument("-o", "--output")
    export.add_argument("--project")

    imp = sub.add_parser("import", help="Import memories from a JSON export file")
    imp.add_argument("file")
    imp.add_argument(
        "--replace", action="store_true", help="Replace all existing data instead of merging"
    )

    sub.add_parser("setup", help="Set up cortexmem for your AI agent")

    delete = sub.add_parser("delete", help="Delete an observation by ID")
    delete.add_argument("id", type=int)
    delete.add_argument(
        "--hard", action="store_true", help="Permanently remove from all tables"
    )

    save_prompt = sub.add_parser("save-prompt", help="Save a user prompt to the prompt log")
    save_prompt.add_argument("content")
    save_prompt.add_argument("--project")

    recent = sub.add_parser("recent-prompts", help="List recent prompts for a project")
    recent.add_argument("--project")
    recent.add_argument("-l", "--limit", type=int, default=DEFAULT_RECENT_PROMPTS)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; returns the process exit status."""
    logging.basicConfig(stream=sys.stderr, level=logging.WARNING)
    args = _build_parser().parse_args(argv)
    try:
        match args.command:
            case "get":
                run_get(args.id)
            case "stats":
                run_stats()
            case "export":
                run_export(args.output, args.project)
            case "import":
                run_import(args.file, args.replace)
            case "setup":
                _run_setup()
            case "delete":
                _run_delete(args.id, args.hard)
            case "save-prompt":
                run_save_prompt(args.content, args.project)
            case "recent-prompts":
                run_recent_prompts(args.project, args.limit)
    except (OSError, ValueError, LookupError, RuntimeError, sqlite3.Error) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())