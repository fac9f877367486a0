"""
Session-related models for the interview runtime.

These describe:
- SessionStatus enum (CREATED, SPEAKING, WAITING, COMPLETED)
- SessionConfig (avatar identity, language, interaction mode)
- transcript entries, as a tagged union of PromptEntry / ResponseEntry
- SessionResult + statistics frozen at termination
- the Session record itself

All models serialize with camelCase aliases, matching what the browser
client sends and expects.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


NO_RESPONSE_PLACEHOLDER = "[No response detected]"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SessionStatus(str, Enum):
    CREATED = "created"
    SPEAKING = "speaking"
    WAITING = "waiting"
    COMPLETED = "completed"


class VoiceSettings(CamelModel):
    model_config = ConfigDict(frozen=True)

    rate: float = 1.0
    emotion: str = "FRIENDLY"


class SessionConfig(CamelModel):
    model_config = ConfigDict(frozen=True)

    avatar_id: str = "Ann_Therapist"
    language: str = "en"
    quality: Literal["low", "medium", "high"] = "low"
    voice: VoiceSettings = Field(default_factory=VoiceSettings)
    knowledge_id: Optional[str] = None
    interview_mode: bool = True


class PromptEntry(CamelModel):
    """A question spoken by the avatar."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["prompt"] = "prompt"
    text: str
    timestamp: datetime
    task_type: str = "repeat"
    question_type: str = "interview"


class ResponseEntry(CamelModel):
    """A candidate answer, correlated to the prompt pending when it arrived."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["response"] = "response"
    text: str
    timestamp: datetime
    response_type: str = "voice"
    confidence: Optional[float] = None
    duration: Optional[float] = None
    correlated_prompt_timestamp: Optional[datetime] = None


TranscriptEntry = Annotated[
    Union[PromptEntry, ResponseEntry], Field(discriminator="kind")
]


class DurationStats(CamelModel):
    model_config = ConfigDict(frozen=True)

    duration_ms: int
    duration_minutes: float
    formatted: str


class InterviewStatistics(CamelModel):
    model_config = ConfigDict(frozen=True)

    total_prompts: int
    total_responses: int
    # Sequence-adjacency latency (gap to the preceding transcript entry).
    average_response_latency_seconds: float
    # Latency measured against each response's correlated prompt.
    average_correlated_latency_seconds: float
    unanswered_prompts: int
    uncorrelated_responses: int


class SessionResult(CamelModel):
    model_config = ConfigDict(frozen=True)

    session_id: str
    status: SessionStatus = SessionStatus.COMPLETED
    reason: str
    started_at: datetime
    ended_at: datetime
    duration: DurationStats
    statistics: InterviewStatistics
    transcript: List[TranscriptEntry]
    responses: List[ResponseEntry]
    config: SessionConfig


class Session(CamelModel):
    id: str
    status: SessionStatus = SessionStatus.CREATED
    created_at: datetime
    ended_at: Optional[datetime] = None
    config: SessionConfig = Field(default_factory=SessionConfig)
    transcript: List[TranscriptEntry] = Field(default_factory=list)
    responses: List[ResponseEntry] = Field(default_factory=list)
    current_question: Optional[PromptEntry] = None
    last_activity: datetime
    end_reason: Optional[str] = None
    results: Optional[SessionResult] = None

    @property
    def is_closed(self) -> bool:
        return self.status == SessionStatus.COMPLETED

    @property
    def last_response(self) -> Optional[ResponseEntry]:
        return self.responses[-1] if self.responses else None

    @property
    def total_prompts(self) -> int:
        return sum(1 for entry in self.transcript if entry.kind == "prompt")

    @property
    def total_responses(self) -> int:
        return len(self.responses)


class SessionSummary(CamelModel):
    """List view of a session: never carries the transcript."""

    id: str
    status: SessionStatus
    created_at: datetime
