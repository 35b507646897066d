"""TieBreakSelector — pick the winner among equally-scored candidates."""

from __future__ import annotations

from brokercrm.domain.policies.scoring import AgentScore

SCORE_EPSILON = 1e-9


def tied_at_top(scores: list[AgentScore], tolerance: float = 0.0) -> list[AgentScore]:
    """Return every score within *tolerance* of the maximum."""
    if not scores:
        return []
    top = max(s.total for s in scores)
    return [s for s in scores if top - s.total <= tolerance + SCORE_EPSILON]


def _rotation_key(score: AgentScore) -> tuple[int, int]:
    # never-assigned agents (seq None) go first, then oldest sequence, then id
    seq = score.agent.last_assignment_seq
    return (-1 if seq is None else seq, score.agent.id)


def select_agent(
    scores: list[AgentScore],
    use_round_robin: bool,
    tolerance: float = 0.0,
) -> AgentScore | None:
    """Deterministic pick among the top-scored candidates.

    1. Keep candidates whose score ties the maximum (within tolerance).
    2. Round-robin on: least recently assigned agent wins, ties by id.
    3. Round-robin off: lowest agent id wins, for reproducibility.

    Args:
        scores: scored candidates (any order).
        use_round_robin: whether rotating fairness is enabled.
        tolerance: score distance still considered a tie.

    Returns:
        The winning AgentScore, or None when there were no candidates.

    Raises:
        ValueError: if tolerance is negative.
    """
    if tolerance < 0:
        raise ValueError("Tie tolerance must not be negative")

    tied = tied_at_top(scores, tolerance)
    if not tied:
        return None

    if use_round_robin:
        return min(tied, key=_rotation_key)

    return min(tied, key=lambda s: s.agent.id)
