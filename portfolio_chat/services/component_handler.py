"""
Component display: emits the canned component message, then schedules its generated follow-up.
"""

import threading
import time
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from typing import Optional, Sequence, Set

from ..models.core import ComponentType, Message
from ..utils.logging_config import get_logger
from .component_context import COMPONENT_SPECS, GENERIC_FALLBACK, create_component_context
from .conversation_memory import ConversationMemory
from .rag_engine import RAGEngine

logger = get_logger(__name__)


@dataclass
class ComponentResponse:
    """Component message available now, plus the follow-up still being generated."""
    message: Message
    follow_up: Optional[Future] = None


class RequestTracker:
    """In-flight requests keyed by request id."""

    def __init__(self):
        self._in_flight: Set[str] = set()
        self._lock = threading.Lock()

    def begin(self, request_id: str) -> bool:
        """Mark a request as in flight. False if it already is."""
        with self._lock:
            if request_id in self._in_flight:
                return False
            self._in_flight.add(request_id)
            return True

    def complete(self, request_id: str) -> None:
        with self._lock:
            self._in_flight.discard(request_id)

    def is_in_flight(self, request_id: str) -> bool:
        with self._lock:
            return request_id in self._in_flight


class ComponentHandler:
    """Shows components and generates their follow-up messages on an executor."""

    def __init__(self, engine: RAGEngine, executor: Executor, follow_up_delay: float = 0.0):
        """
        Initialize the handler.

        Args:
            engine: RAG engine used for follow-up generation
            executor: Executor running follow-up generation
            follow_up_delay: Seconds to wait before generating a follow-up
        """
        self.engine = engine
        self.executor = executor
        self.follow_up_delay = follow_up_delay

    def show(self,
             component_type: ComponentType,
             content: str,
             chat_history: Sequence[Message],
             memory: ConversationMemory) -> ComponentResponse:
        """
        Emit a component message and schedule its follow-up.

        The component message is recorded in memory before the follow-up is submitted.

        Args:
            component_type: Component to show
            content: User message that requested it
            chat_history: Conversation the follow-up is generated against
            memory: Conversation memory of the session

        Returns:
            ComponentResponse with the component message and a Future resolving to the follow-up
            Message (no follow-up for the "more" picker)
        """
        if component_type == ComponentType.MORE:
            logger.debug('Showing more options picker')
            return ComponentResponse(message=Message(role='assistant', content='', component_type=ComponentType.MORE))

        spec = COMPONENT_SPECS[component_type]
        component_context = create_component_context(component_type, content)
        message = Message(role='assistant',
                          content=spec.lead_in,
                          component_type=component_type,
                          component_context=component_context)

        memory.update_from_message(message)
        logger.info(f'Showing component: {component_type.value}')

        history = list(chat_history)
        follow_up = self.executor.submit(self._generate_follow_up, component_type, content, history, message)
        return ComponentResponse(message=message, follow_up=follow_up)

    def _generate_follow_up(self,
                            component_type: ComponentType,
                            content: str,
                            chat_history: Sequence[Message],
                            component_message: Message) -> Message:
        if self.follow_up_delay > 0:
            time.sleep(self.follow_up_delay)

        fallback = COMPONENT_SPECS[component_type].follow_up_fallback if component_type in COMPONENT_SPECS \
            else GENERIC_FALLBACK

        try:
            text = self.engine.generate(content, chat_history, component_context=component_message.component_context)
        except Exception as e:
            logger.error(f'Error getting follow-up for {component_type.value}: {e}')
            text = None

        return Message(role='assistant', content=text or fallback)
