from pydantic import BaseModel

from debate_arena.debate_engine.models import DebateMessage


class MessageResponse(BaseModel):
    """Response model for debate messages."""

    id: str
    speaker: str
    position: str
    round_number: int
    content: str
    timestamp: str
    word_count: int

    @classmethod
    def from_message(cls, message: DebateMessage) -> "MessageResponse":
        return cls(
            id=message.id,
            speaker=message.speaker.value,
            position=message.speaker.position.value,
            round_number=message.round,
            content=message.content,
            timestamp=message.timestamp.isoformat(),
            word_count=message.word_count,
        )
