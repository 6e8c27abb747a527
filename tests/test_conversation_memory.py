"""
Tests for per-session conversation memory.
"""

from datetime import datetime, timedelta

from portfolio_chat.models.core import ComponentContext, ComponentType, Message
from portfolio_chat.services.conversation_memory import ABSORBED_ID_WINDOW, ConversationMemory


def shown_message(component_type: ComponentType, query: str) -> Message:
    return Message(role='assistant',
                   content='Here it is:',
                   component_type=component_type,
                   component_context=ComponentContext(type=component_type, shown=True, user_query=query))


class TestRecording:

    def test_empty_memory(self):
        memory = ConversationMemory()

        assert memory.get_last_shown_component() is None
        assert memory.build_context_string() == ''
        assert memory.get_conversation_flow() == []

    def test_record_component_shown(self):
        memory = ConversationMemory()
        shown_at = datetime(2025, 1, 1, 12, 0, 0)

        record = memory.record_component_shown(ComponentType.PROJECTS, 'show me your projects', shown_at)

        assert memory.get_last_shown_component() is record
        assert memory.get_component_memory(ComponentType.PROJECTS) is record
        assert record.associated_data['featured'][0] == 'Study Buddy'
        assert memory.get_conversation_flow() == ['shown_projects']

    def test_latest_record_per_type_wins(self):
        memory = ConversationMemory()

        memory.record_component_shown(ComponentType.FUN, 'first')
        memory.record_component_shown(ComponentType.SKILLS, 'skills')
        memory.record_component_shown(ComponentType.FUN, 'second')

        assert memory.get_component_memory(ComponentType.FUN).triggering_query == 'second'
        assert memory.get_last_shown_component().component_type == ComponentType.FUN

    def test_user_query_flow_entry_is_truncated(self):
        memory = ConversationMemory()

        memory.record_user_query('what is your approach to debugging')

        assert memory.get_conversation_flow() == ['query_what is your approac']

    def test_update_from_message(self):
        memory = ConversationMemory()

        memory.update_from_message(Message(role='user', content='who are you'))
        memory.update_from_message(shown_message(ComponentType.PROFILE, 'who are you'))
        memory.update_from_message(Message(role='assistant', content='plain reply'))

        assert memory.get_conversation_flow() == ['query_who are you', 'shown_profile']
        assert memory.get_component_memory(ComponentType.PROFILE).triggering_query == 'who are you'

    def test_update_is_idempotent_per_message(self):
        memory = ConversationMemory()
        message = shown_message(ComponentType.FUN, 'crazy stuff')

        memory.update_from_message(message)
        memory.update_from_message(message)

        assert memory.get_conversation_flow() == ['shown_fun']

    def test_absorbed_ids_keep_only_recent_window(self):
        memory = ConversationMemory()
        messages = [Message(role='user', content=f'question {index}') for index in range(ABSORBED_ID_WINDOW + 10)]

        for message in messages:
            memory.update_from_message(message)
        memory.update_from_message(messages[-1])

        assert len(memory._absorbed_message_ids) == ABSORBED_ID_WINDOW
        assert len(memory.get_conversation_flow()) == ABSORBED_ID_WINDOW + 10


class TestRecency:

    def test_recent_within_window(self):
        memory = ConversationMemory()
        shown_at = datetime(2025, 1, 1, 12, 0, 0)
        memory.record_component_shown(ComponentType.FUN, 'adventures', shown_at)

        assert memory.has_recent_component(ComponentType.FUN, now=shown_at + timedelta(minutes=4))
        assert not memory.has_recent_component(ComponentType.FUN, now=shown_at + timedelta(minutes=6))
        assert memory.has_recent_component(ComponentType.FUN, within_minutes=10, now=shown_at + timedelta(minutes=6))

    def test_never_shown(self):
        assert not ConversationMemory().has_recent_component(ComponentType.SKILLS)


class TestContextStrings:

    def test_projects_context(self):
        memory = ConversationMemory()
        memory.record_component_shown(ComponentType.PROJECTS, 'show me your projects')

        context = memory.build_context_string()

        assert context.startswith('\nRECENT COMPONENT CONTEXT:')
        assert 'shown for query: "show me your projects"' in context
        assert 'Featured Projects: Study Buddy, RAG Chatbot' in context
        assert 'Impact: Helped 200+ students' in context

    def test_fun_context(self):
        memory = ConversationMemory()
        memory.record_component_shown(ComponentType.FUN, 'fun stuff')

        context = memory.build_context_string(ComponentType.FUN)

        assert 'ADVENTURE DETAILS AVAILABLE:' in context
        assert 'Kedarnath Trek Details: Epic 22km trek to Kedarnath Temple' in context

    def test_component_without_data(self):
        memory = ConversationMemory()
        memory.record_component_shown(ComponentType.CONTACT, 'contact')

        assert '- Component data available for elaboration' in memory.build_context_string()

    def test_context_for_type_never_shown(self):
        memory = ConversationMemory()
        memory.record_component_shown(ComponentType.CONTACT, 'contact')

        assert memory.build_context_string(ComponentType.SKILLS) == ''

    def test_enhanced_context_adventure_hint(self):
        memory = ConversationMemory()
        memory.record_component_shown(ComponentType.FUN, 'fun stuff')

        context = memory.get_enhanced_context("what's the craziest thing you did", ComponentType.FUN)

        assert 'ADVENTURE DETAILS AVAILABLE:' in context
        assert 'QUERY CONTEXT: User is asking about crazy/adventure experiences' in context

    def test_enhanced_context_without_recent_fun(self):
        context = ConversationMemory().get_enhanced_context('craziest adventure')

        assert context == ''

    def test_enhanced_context_philosophy_and_experience(self):
        context = ConversationMemory().get_enhanced_context('Your work philosophy and professional experience?')

        assert 'philosophical question, not a request to see projects' in context
        assert 'details about professional experience' in context

    def test_clear(self):
        memory = ConversationMemory()
        message = shown_message(ComponentType.SKILLS, 'skills')
        memory.update_from_message(message)

        memory.clear()

        assert memory.get_last_shown_component() is None
        assert memory.get_conversation_flow() == []
        memory.update_from_message(message)
        assert memory.get_conversation_flow() == ['shown_skills']
