"""
Per-session conversation memory of shown components, used to enrich RAG prompts.
"""

import re
from collections import deque
from datetime import datetime
from typing import Deque, Dict, List, Optional, Union

from ..models.core import ComponentMemory, ComponentType, Message
from ..utils.logging_config import get_logger
from ..utils.timestamp_utils import seconds_since, to_datetime, to_display_str
from .component_context import COMPONENT_DATA, PROFILE_LOCATION, PROFILE_STATUS, get_component_data

logger = get_logger(__name__)

FLOW_QUERY_PREFIX_LENGTH = 20
# Only the last few messages are ever replayed into memory
ABSORBED_ID_WINDOW = 32

_ADVENTURE_QUERY = re.compile(r'craziest|crazy|adventure', re.IGNORECASE)
_PHILOSOPHY_QUERY = re.compile(r'work philosophy|approach', re.IGNORECASE)
_EXPERIENCE_QUERY = re.compile(r'professional experience', re.IGNORECASE)

Timestamp = Union[int, float, datetime]


class ConversationMemory:
    """Which components were shown in one conversation, when, and for what query.

    One instance per chat session. Nothing here is shared between sessions.
    """

    def __init__(self):
        self._shown_components: Dict[ComponentType, ComponentMemory] = {}
        self._last_component: Optional[ComponentMemory] = None
        self._conversation_flow: List[str] = []
        self._absorbed_message_ids: Deque[str] = deque(maxlen=ABSORBED_ID_WINDOW)

    def record_component_shown(self,
                               component_type: ComponentType,
                               triggering_query: str,
                               timestamp: Optional[Timestamp] = None) -> ComponentMemory:
        """
        Remember that a component was shown, replacing any earlier record for the type.

        Args:
            component_type: Component that was shown
            triggering_query: User message that caused it
            timestamp: When it was shown (current time if None)

        Returns:
            The stored ComponentMemory
        """
        memory = ComponentMemory(component_type=component_type,
                                 associated_data=get_component_data(component_type),
                                 shown_at=to_datetime(timestamp),
                                 triggering_query=triggering_query)

        self._shown_components[component_type] = memory
        self._last_component = memory
        self._conversation_flow.append(f'shown_{component_type.value}')

        logger.debug(f'Updated component memory: {component_type.value}')
        return memory

    def record_user_query(self, text: str, timestamp: Optional[Timestamp] = None) -> None:
        """Append a short breadcrumb for a user query to the conversation flow."""
        self._conversation_flow.append(f'query_{text[:FLOW_QUERY_PREFIX_LENGTH]}')

    def update_from_message(self, message: Message) -> None:
        """
        Absorb a chat message: shown component messages and user queries are recorded.

        A message id is absorbed at most once, so replaying the same history is a no-op.
        """
        if message.id in self._absorbed_message_ids:
            return
        self._absorbed_message_ids.append(message.id)

        if message.is_shown_component:
            self.record_component_shown(message.component_type, message.component_context.user_query,
                                        message.timestamp)
        elif message.role == 'user':
            self.record_user_query(message.content, message.timestamp)

    def get_last_shown_component(self) -> Optional[ComponentMemory]:
        return self._last_component

    def get_component_memory(self, component_type: ComponentType) -> Optional[ComponentMemory]:
        return self._shown_components.get(component_type)

    def has_recent_component(self,
                             component_type: ComponentType,
                             within_minutes: float = 5,
                             now: Optional[Timestamp] = None) -> bool:
        """True if the component was shown no more than within_minutes ago."""
        memory = self.get_component_memory(component_type)
        if memory is None:
            return False
        return seconds_since(memory.shown_at, now) <= within_minutes * 60

    def get_conversation_flow(self) -> List[str]:
        return list(self._conversation_flow)

    def build_context_string(self, component_type: Optional[ComponentType] = None) -> str:
        """
        Render the facts of a shown component for the RAG prompt.

        Args:
            component_type: Component to describe, the last shown one if None

        Returns:
            Context block, or an empty string when there is nothing to describe
        """
        if component_type is None:
            if self._last_component is None:
                return ''
            component_type = self._last_component.component_type

        memory = self.get_component_memory(component_type)
        if memory is None:
            return ''

        data = memory.associated_data
        lines = [
            '',
            'RECENT COMPONENT CONTEXT:',
            f'Component: {component_type.value} (shown for query: "{memory.triggering_query}")',
            f'Shown at: {to_display_str(memory.shown_at)}',
        ]

        if component_type == ComponentType.FUN:
            lines += ['', 'ADVENTURE DETAILS AVAILABLE:', f"- Adventures: {', '.join(data.get('adventures', []))}"]
            kedarnath = data.get('highlights', {}).get('kedarnath')
            if kedarnath:
                lines += [
                    f"- Kedarnath Trek Details: {kedarnath['description']}",
                    f"- Experience: {kedarnath['experience']}",
                    f"- Challenges: {kedarnath['challenges']}",
                ]
        elif component_type == ComponentType.PROJECTS:
            lines += ['', 'PROJECT DETAILS AVAILABLE:', f"- Featured Projects: {', '.join(data.get('featured', []))}"]
            study_buddy = data.get('details', {}).get('study_buddy')
            if study_buddy:
                lines += [
                    f"- Study Buddy: {study_buddy['description']}",
                    f"- Impact: {study_buddy['impact']}",
                    f"- Duration: {study_buddy['duration']}",
                ]
        elif component_type == ComponentType.SKILLS:
            lines += [
                '',
                'SKILLS DETAILS AVAILABLE:',
                f"- Categories: {', '.join(data.get('categories', []))}",
                f"- Favorites: {', '.join(data.get('favorites', []))}",
                f"- Expertise Note: {data.get('expertise', '')}",
            ]
        elif component_type == ComponentType.PROFILE:
            lines += [
                '',
                'PROFILE CONTEXT:',
                f'- Current Status: {PROFILE_STATUS}',
                f'- Location: {PROFILE_LOCATION}',
                f"- Experience: {COMPONENT_DATA['experience']['professional']}",
            ]
        else:
            lines.append('- Component data available for elaboration')

        return '\n'.join(lines) + '\n'

    def get_enhanced_context(self, query: str, component_type: Optional[ComponentType] = None) -> str:
        """
        Component context plus static hints for recognised query patterns.

        Args:
            query: Current user query
            component_type: Component whose facts to include (none if None)

        Returns:
            Concatenated context text, possibly empty
        """
        context = ''
        if component_type is not None:
            context += self.build_context_string(component_type)

        if _ADVENTURE_QUERY.search(query) and self.has_recent_component(ComponentType.FUN):
            context += ('\nQUERY CONTEXT: User is asking about crazy/adventure experiences after seeing the fun '
                        'component with Kedarnath trek details.\n')

        if _PHILOSOPHY_QUERY.search(query):
            context += ('\nQUERY CONTEXT: User is asking about work philosophy/approach - this is a philosophical '
                        'question, not a request to see projects.\n')

        if _EXPERIENCE_QUERY.search(query):
            context += ('\nQUERY CONTEXT: User wants details about professional experience - should focus on '
                        'hackathons, achievements, and experience narrative rather than just showing profile.\n')

        return context

    def clear(self) -> None:
        """Forget everything; called when the session ends."""
        self._shown_components = {}
        self._last_component = None
        self._conversation_flow = []
        self._absorbed_message_ids.clear()
        logger.debug('Conversation memory cleared')
