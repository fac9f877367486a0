"""Final interview statistics, computed once at termination.

Rounding follows the browser client's arithmetic (round half up), so
125000 ms renders as 2.08 minutes and "2m 5s" on both sides.

Two latency figures are reported:

- average_response_latency_seconds: for each response after the first,
  the gap to the transcript entry immediately before it; the first
  response contributes 0. The sum is divided by the total number of
  responses. This is the figure downstream automations consume.
- average_correlated_latency_seconds: the gap between each response and
  the prompt it was correlated with at record time.

The two agree on strictly alternating prompt/response runs and diverge
when prompts go unanswered or responses arrive back to back.
"""

import math
from datetime import datetime, timedelta
from typing import List, Sequence

from ..models.session_models import (
    DurationStats,
    InterviewStatistics,
    ResponseEntry,
    Session,
    SessionResult,
    TranscriptEntry,
)


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def compute_duration(created_at: datetime, ended_at: datetime) -> DurationStats:
    duration_ms = (ended_at - created_at) // timedelta(milliseconds=1)
    minutes = round_half_up(duration_ms / 60000, 2)
    seconds = int(round_half_up((minutes % 1) * 60))
    return DurationStats(
        duration_ms=duration_ms,
        duration_minutes=minutes,
        formatted=f"{math.floor(minutes)}m {seconds}s",
    )


def sequence_latencies(transcript: Sequence[TranscriptEntry]) -> List[float]:
    """Per-response latency in seconds, measured against the preceding entry."""
    latencies: List[float] = []
    previous = None
    for entry in transcript:
        if entry.kind == "response":
            if not latencies:
                latencies.append(0.0)
            else:
                latencies.append((entry.timestamp - previous.timestamp).total_seconds())
        previous = entry
    return latencies


def correlated_latencies(responses: Sequence[ResponseEntry]) -> List[float]:
    """Per-response latency in seconds, measured against the correlated prompt."""
    return [
        (r.timestamp - r.correlated_prompt_timestamp).total_seconds()
        for r in responses
        if r.correlated_prompt_timestamp is not None
    ]


def count_unanswered_prompts(transcript: Sequence[TranscriptEntry]) -> int:
    """Prompts followed by another prompt (or by nothing) before any response."""
    unanswered = 0
    pending = False
    for entry in transcript:
        if entry.kind == "prompt":
            if pending:
                unanswered += 1
            pending = True
        else:
            pending = False
    if pending:
        unanswered += 1
    return unanswered


def _mean(values: Sequence[float], count: int) -> float:
    if count == 0:
        return 0.0
    return sum(values) / count


def compute_statistics(
    transcript: Sequence[TranscriptEntry],
    responses: Sequence[ResponseEntry],
) -> InterviewStatistics:
    total_responses = len(responses)
    correlated = correlated_latencies(responses)
    return InterviewStatistics(
        total_prompts=sum(1 for entry in transcript if entry.kind == "prompt"),
        total_responses=total_responses,
        average_response_latency_seconds=_mean(
            sequence_latencies(transcript), total_responses
        ),
        average_correlated_latency_seconds=_mean(correlated, len(correlated)),
        unanswered_prompts=count_unanswered_prompts(transcript),
        uncorrelated_responses=sum(
            1 for r in responses if r.correlated_prompt_timestamp is None
        ),
    )


def build_result(session: Session, reason: str, ended_at: datetime) -> SessionResult:
    """Freeze the session's transcript into a SessionResult."""
    return SessionResult(
        session_id=session.id,
        reason=reason,
        started_at=session.created_at,
        ended_at=ended_at,
        duration=compute_duration(session.created_at, ended_at),
        statistics=compute_statistics(session.transcript, session.responses),
        transcript=list(session.transcript),
        responses=list(session.responses),
        config=session.config,
    )
