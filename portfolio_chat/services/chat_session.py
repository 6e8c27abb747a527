"""
Chat sessions: message history, conversation memory and routing for one conversation each.
"""

import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from ..models.core import ComponentContext, Message, ProcessingResult, generate_message_id
from ..utils.logging_config import get_logger
from .component_handler import ComponentHandler, RequestTracker
from .conversation_memory import ConversationMemory
from .intent_analyzer import IntentAnalyzer
from .message_processor import MessageProcessor
from .rag_engine import RAGEngine, build_intent_context

logger = get_logger(__name__)

ERROR_REPLY = 'Sorry, I encountered an error. Please try again!'
DEFAULT_IDLE_TIMEOUT = 60 * 60.0


@dataclass
class ChatTurn:
    """Outcome of one user message."""
    request_id: str
    user_message: Message
    result: Optional[ProcessingResult]
    replies: List[Message] = field(default_factory=list)
    follow_up: Optional[Future] = None

    def wait(self, timeout: Optional[float] = None) -> List[Message]:
        """All assistant messages of the turn, waiting for the follow-up if there is one."""
        replies = list(self.replies)
        if self.follow_up is not None:
            replies.append(self.follow_up.result(timeout=timeout))
        return replies


class ChatSession:
    """One conversation. Sessions share the engine but nothing else."""

    def __init__(self,
                 session_id: str,
                 engine: RAGEngine,
                 handler: ComponentHandler,
                 analyzer: Optional[IntentAnalyzer] = None):
        """
        Initialize the session.

        Args:
            session_id: Session identifier
            engine: Shared RAG engine
            handler: Component handler
            analyzer: Intent analyzer (default rules if None)
        """
        self.session_id = session_id
        self.engine = engine
        self.handler = handler
        self.memory = ConversationMemory()
        self.processor = MessageProcessor(self.memory, analyzer)
        self.tracker = RequestTracker()
        self._messages: List[Message] = []
        self._lock = threading.Lock()
        self._send_lock = threading.Lock()

    @property
    def messages(self) -> List[Message]:
        with self._lock:
            return list(self._messages)

    def _append(self, message: Message) -> None:
        with self._lock:
            self._messages.append(message)

    def send(self, content: str, request_id: Optional[str] = None) -> Optional[ChatTurn]:
        """
        Handle a user message.

        Args:
            content: User message text
            request_id: Client request id (generated if None)

        Returns:
            ChatTurn, or None when a request with the same id is still in flight
        """
        request_id = request_id or generate_message_id()
        if not self.tracker.begin(request_id):
            logger.info(f'Skipping duplicate request {request_id} in session {self.session_id}')
            return None

        # Turns of one session run one at a time, in arrival order
        with self._send_lock:
            return self._process_turn(content, request_id)

    def _process_turn(self, content: str, request_id: str) -> ChatTurn:
        user_message = Message(role='user', content=content)
        self._append(user_message)
        history = self.messages

        try:
            result = self.processor.process(content, history)
        except Exception as e:
            logger.error(f'Error processing message in session {self.session_id}: {e}')
            reply = Message(role='assistant', content=ERROR_REPLY)
            self._append(reply)
            self.tracker.complete(request_id)
            return ChatTurn(request_id=request_id, user_message=user_message, result=None, replies=[reply])

        turn = ChatTurn(request_id=request_id, user_message=user_message, result=result)

        if result.should_show_component and result.component_type is not None:
            response = self.handler.show(result.component_type, content, history, self.memory)
            self._append(response.message)
            turn.replies.append(response.message)

            if response.follow_up is None:
                self.tracker.complete(request_id)
            else:
                # Resolves only once the follow-up is part of the history
                appended = Future()
                turn.follow_up = appended
                response.follow_up.add_done_callback(
                    lambda future: self._on_follow_up(request_id, future, appended))
            return turn

        try:
            reply = Message(role='assistant', content=self._answer(content, history, result))
            self._append(reply)
        finally:
            self.tracker.complete(request_id)

        turn.replies.append(reply)
        return turn

    def _answer(self, content: str, history: List[Message], result: ProcessingResult) -> str:
        recent = self.memory.get_last_shown_component()
        component_type = result.intent_analysis.recent_component_ref or (recent.component_type if recent else None)

        # Questions about a shown component are answered from that component's facts
        if result.needs_context and component_type is not None:
            component_context = ComponentContext(type=component_type, shown=True, user_query=content)
            return self.engine.generate(content, history, component_context=component_context)

        enhanced_context = self.memory.get_enhanced_context(content, component_type)
        context = build_intent_context(None, enhanced_context, result.intent_analysis.intent_type)
        return self.engine.generate(content, history, enhanced_context=context)

    def _on_follow_up(self, request_id: str, future: Future, appended: Future) -> None:
        try:
            message = future.result()
        except Exception as e:
            logger.error(f'Follow-up failed in session {self.session_id}: {e}')
            self.tracker.complete(request_id)
            appended.set_exception(e)
            return

        self._append(message)
        self.tracker.complete(request_id)
        appended.set_result(message)

    def reset(self) -> None:
        """Clear the history and the conversation memory."""
        with self._send_lock:
            with self._lock:
                self._messages = []
            self.memory.clear()
        logger.info(f'Session {self.session_id} reset')


class SessionRegistry:
    """Chat sessions by id, all sharing one engine and credential pool.

    Sessions unused for longer than `idle_timeout` seconds are dropped on the next lookup.
    """

    def __init__(self,
                 engine: RAGEngine,
                 handler: ComponentHandler,
                 analyzer: Optional[IntentAnalyzer] = None,
                 idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
                 clock: Callable[[], float] = time.monotonic):
        self.engine = engine
        self.handler = handler
        self.analyzer = analyzer
        self.idle_timeout = idle_timeout
        self._clock = clock
        self._sessions: Dict[str, ChatSession] = {}
        self._last_seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> ChatSession:
        """Return the session, creating it on first use."""
        with self._lock:
            now = self._clock()
            self._evict_idle(now)

            session = self._sessions.get(session_id)
            if session is None:
                session = ChatSession(session_id, self.engine, self.handler, self.analyzer)
                self._sessions[session_id] = session
                logger.debug(f'Created chat session {session_id}')
            self._last_seen[session_id] = now
            return session

    def _evict_idle(self, now: float) -> None:
        idle = [session_id for session_id, seen in self._last_seen.items() if now - seen >= self.idle_timeout]
        for session_id in idle:
            del self._sessions[session_id]
            del self._last_seen[session_id]
        if idle:
            logger.info(f'Evicted {len(idle)} idle chat sessions')

    def reset(self, session_id: str) -> bool:
        """Reset a session and drop it from the registry. False if it does not exist."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
            self._last_seen.pop(session_id, None)
        if session is None:
            return False
        session.reset()
        return True

    @property
    def session_count(self) -> int:
        with self._lock:
            return len(self._sessions)
