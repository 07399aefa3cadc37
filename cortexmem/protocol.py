"""Plain-text renderings of memory records for agents."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from cortexmem.db.observations import Observation
from cortexmem.db.prompts import Prompt


def format_compact(observations: Sequence[Observation]) -> str:
    """One line per observation: id, title, type and concepts."""
    if not observations:
        return "No results found."
    lines = []
    for obs in observations:
        concepts = "" if obs.concepts is None else f" — {', '.join(obs.concepts)}"
        lines.append(f"[{obs.id}] {obs.title} ({obs.obs_type}){concepts}\n")
    return "".join(lines)


def format_full(obs: Observation) -> str:
    """Every field of an observation, content last."""
    out = [
        f"# {obs.title} (id: {obs.id})\n\n"
        f"Type: {obs.obs_type} | Tier: {obs.tier} | Scope: {obs.scope}\n"
    ]
    if obs.concepts:
        out.append(f"Concepts: {', '.join(obs.concepts)}\n")
    if obs.facts:
        out.append(f"Facts: {'; '.join(obs.facts)}\n")
    if obs.files:
        out.append(f"Files: {', '.join(obs.files)}\n")
    if obs.topic_key is not None:
        out.append(f"Topic: {obs.topic_key}\n")
    out.append(
        f"Accesses: {obs.access_count} | Revisions: {obs.revision_count}\n"
        f"Created: {obs.created_at} | Updated: {obs.updated_at}\n\n"
        f"{obs.content}\n"
    )
    return "".join(out)


def format_prompts(prompts: Sequence[Prompt]) -> str:
    """A "Recent Prompts" section, or an empty string when there are none."""
    if not prompts:
        return ""
    lines = ["## Recent Prompts\n"]
    lines += [f"- [{p.created_at}] {p.content}\n" for p in prompts]
    return "".join(lines)


def format_stats(
    project: str,
    total: int,
    by_tier: Iterable[tuple[str, int]],
    by_type: Iterable[tuple[str, int]],
    model_status: str,
) -> str:
    out = [f"# Stats for {project}\n\nTotal observations: {total}\n\n", "By tier:\n"]
    out += [f"  {tier}: {count}\n" for tier, count in by_tier]
    out.append("\nBy type:\n")
    out += [f"  {obs_type}: {count}\n" for obs_type, count in by_type]
    out.append(f"\nModel: {model_status}\n")
    return "".join(out)