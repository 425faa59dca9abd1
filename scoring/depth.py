"""
Roster enrichment and positional depth.

Pure functions: a Roster plus the current PlayerSnapshot in, frozen
RosterAnalysis out. Nothing here touches the network or the disk.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from config.scoring_rules import (
    BENCH_WEIGHT,
    DEPTH_MULTIPLIERS,
    OVERALL_STRONG_MAX_WEAK,
    OVERALL_STRONG_MIN_STRONG,
    OVERALL_WEAK_MIN_WEAK,
    POSITIONS,
    STARTER_WEIGHT,
    STRENGTH_THRESHOLDS,
)
from storage.player_snapshot import PlayerSnapshot
from venues.sleeper.models import League, Roster

from .models import EnrichedPlayer, PositionDepth, RosterAnalysis, Strength


def enrich_roster(roster: Roster, snapshot: PlayerSnapshot) -> List[EnrichedPlayer]:
    """
    Join every rostered id against the snapshot.

    Total: ids missing from the snapshot come back as placeholder records,
    so len(result) == len(roster.players) always holds.
    """
    starters = set(roster.starters)
    return [
        EnrichedPlayer(player=snapshot.resolve(pid), is_starter=pid in starters)
        for pid in roster.players
    ]


def depth_score(position: str, starter_count: int, bench_count: int) -> int:
    raw = starter_count * STARTER_WEIGHT + bench_count * BENCH_WEIGHT
    # round() is banker's rounding; depth scores round half up
    return int(raw * DEPTH_MULTIPLIERS.get(position, 1.0) + 0.5)


def strength_tier(position: str, total_count: int) -> Strength:
    strong_at, average_at = STRENGTH_THRESHOLDS.get(position, (2, 1))
    if total_count >= strong_at:
        return "Strong"
    if total_count >= average_at:
        return "Average"
    return "Weak"


def overall_strength(tiers: Iterable[Strength]) -> Strength:
    tiers = list(tiers)
    strong = tiers.count("Strong")
    weak = tiers.count("Weak")
    if strong >= OVERALL_STRONG_MIN_STRONG and weak <= OVERALL_STRONG_MAX_WEAK:
        return "Strong"
    if weak >= OVERALL_WEAK_MIN_WEAK:
        return "Weak"
    return "Average"


def position_depths(players: Sequence[EnrichedPlayer]) -> List[PositionDepth]:
    """One PositionDepth per fixed category, in POSITIONS order."""
    grouped: Dict[str, List[EnrichedPlayer]] = {pos: [] for pos in POSITIONS}
    for p in players:
        if p.position in grouped:
            grouped[p.position].append(p)

    out: List[PositionDepth] = []
    for pos in POSITIONS:
        members = grouped[pos]
        starters = tuple(p for p in members if p.is_starter)
        bench = tuple(p for p in members if not p.is_starter)
        out.append(
            PositionDepth(
                position=pos,
                starters=starters,
                bench=bench,
                strength=strength_tier(pos, len(members)),
                depth_score=depth_score(pos, len(starters), len(bench)),
            )
        )
    return out


def analyze_roster(league: League, roster: Roster, snapshot: PlayerSnapshot) -> RosterAnalysis:
    players = enrich_roster(roster, snapshot)
    positions = position_depths(players)

    weak = [p for p in positions if p.strength == "Weak"]
    # Thinnest first: these are where a pickup moves the needle most
    priority = sorted(weak, key=lambda p: p.depth_score)

    return RosterAnalysis(
        league_id=league.league_id,
        league_name=league.name,
        league_status=league.status,
        roster_id=roster.roster_id,
        record=roster.record,
        positions=tuple(positions),
        starters=tuple(p for p in players if p.is_starter),
        bench=tuple(p for p in players if not p.is_starter),
        strengths=tuple(p.position for p in positions if p.strength == "Strong"),
        weaknesses=tuple(p.position for p in weak),
        priority_positions=tuple(p.position for p in priority),
        overall_strength=overall_strength(p.strength for p in positions),
    )


def position_counts(roster: Roster, snapshot: PlayerSnapshot) -> Dict[str, int]:
    """Rostered players per fixed category (placeholders count nowhere)."""
    counts = {pos: 0 for pos in POSITIONS}
    for pid in roster.players:
        rec = snapshot.get(pid)
        if rec is not None and rec.position in counts:
            counts[rec.position] += 1
    return counts
