from datetime import datetime, timezone
from typing import Callable, List, Optional

from src.second_brain.intent_responder import classify
from src.second_brain.logging_setup import get_logger
from src.second_brain.models import ChatMessage
from src.second_brain.persistent_state import PersistentStateContainer

log = get_logger(__name__)

GREETING = (
    "Hi! I'm your Aurora AI. Ask me to synthesize notes, craft plans, or extract insights from your workspace."
)
MISSING_REPLY = "I captured that!"
FAILED_REPLY = "Something went wrong, but I kept your message. Try again in a moment."

AskFn = Callable[[str], Optional[str]]


def greeting_transcript() -> List[ChatMessage]:
    return [ChatMessage(role="assistant", content=GREETING)]


def local_ask(prompt: str) -> Optional[str]:
    return classify(prompt).reply


def _created(message: ChatMessage) -> datetime:
    # Stored timestamps may be naive local time or UTC with a "Z" suffix
    try:
        when = datetime.fromisoformat(message.created_at.replace("Z", "+00:00"))
        if when.tzinfo is None:
            when = when.astimezone()
        return when.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return datetime.min.replace(tzinfo=timezone.utc)


class ChatTranscript:
    """
    Persisted conversation with the assistant.

    The user message is stored before the assistant is asked, so it
    survives a failed request; a failure is answered with FAILED_REPLY.
    """

    def __init__(self, state: PersistentStateContainer[List[ChatMessage]], ask: AskFn = local_ask):
        self.state = state
        self.ask = ask
        self.pending = False

    def messages(self) -> List[ChatMessage]:
        return sorted(self.state.read(), key=_created)

    def send(self, text: str) -> Optional[ChatMessage]:
        text = (text or "").strip()
        if not text or self.pending:
            return None
        self.pending = True
        try:
            optimistic = [*self.state.read(), ChatMessage(role="user", content=text)]
            self.state.replace(optimistic)
            try:
                reply = self.ask(text)
                answer = ChatMessage(role="assistant", content=reply if reply is not None else MISSING_REPLY)
            except Exception as exc:
                log.warning("chat_ask_failed", error=str(exc))
                answer = ChatMessage(role="assistant", content=FAILED_REPLY)
            self.state.replace([*optimistic, answer])
            return answer
        finally:
            self.pending = False

    def clear(self) -> None:
        self.state.reset()
