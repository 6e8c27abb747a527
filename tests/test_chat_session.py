"""
Tests for component display, request tracking and end-to-end chat sessions.
"""

import threading
from concurrent.futures import Future

import pytest

from portfolio_chat.models.core import ComponentType, IntentType, Message
from portfolio_chat.services.chat_session import ChatSession, SessionRegistry
from portfolio_chat.services.component_handler import ComponentHandler, ComponentResponse, RequestTracker
from portfolio_chat.services.conversation_memory import ConversationMemory
from portfolio_chat.services.rag_engine import RAGEngine

from tests.fixtures.fakes import FailingLLM, FakeClock

TIMEOUT = 5


class GatedLLM:
    """Replies reply-<n>. The first call blocks until released."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()
        self.prompts = []
        self._lock = threading.Lock()

    def __call__(self, prompt, credential):
        with self._lock:
            self.prompts.append(prompt)
            number = len(self.prompts)
        if number == 1:
            self.started.set()
            self.release.wait(TIMEOUT)
        return f'reply-{number}'


@pytest.fixture
def handler(engine, executor) -> ComponentHandler:
    return ComponentHandler(engine, executor)


@pytest.fixture
def session(engine, handler) -> ChatSession:
    return ChatSession('session-1', engine, handler)


class TestRequestTracker:

    def test_duplicate_in_flight_rejected(self):
        tracker = RequestTracker()

        assert tracker.begin('req-1') is True
        assert tracker.begin('req-1') is False
        assert tracker.is_in_flight('req-1')

    def test_complete_allows_reuse(self):
        tracker = RequestTracker()
        tracker.begin('req-1')

        tracker.complete('req-1')

        assert not tracker.is_in_flight('req-1')
        assert tracker.begin('req-1') is True


class TestComponentHandler:

    def test_component_message_then_follow_up(self, handler, llm):
        memory = ConversationMemory()
        history = [Message(role='user', content='show me your projects')]

        response = handler.show(ComponentType.PROJECTS, 'show me your projects', history, memory)

        assert response.message.content == 'Here are some of my recent projects:'
        assert response.message.component_type == ComponentType.PROJECTS
        assert response.message.component_context.shown is True
        assert response.message.component_context.available_projects[0] == 'Study Buddy'
        assert memory.get_last_shown_component().component_type == ComponentType.PROJECTS

        follow_up = response.follow_up.result(timeout=TIMEOUT)
        assert follow_up.role == 'assistant'
        assert follow_up.content == llm.reply
        assert follow_up.component_type is None
        assert '- You just showed your projects component to the user' in llm.prompts[0]

    def test_more_bypasses_generation(self, handler, llm):
        response = handler.show(ComponentType.MORE, 'more', [], ConversationMemory())

        assert response.message.content == ''
        assert response.message.component_type == ComponentType.MORE
        assert response.follow_up is None
        assert llm.prompts == []

    def test_generation_failure_uses_component_fallback(self, store, make_pool, rag_config, executor):
        engine = RAGEngine(store, make_pool(1), FailingLLM(), rag_config)
        handler = ComponentHandler(engine, executor)

        response = handler.show(ComponentType.SKILLS, 'skills', [], ConversationMemory())

        assert response.follow_up.result(timeout=TIMEOUT).content.startswith("My toolkit's sharp")

    def test_empty_generation_uses_handler_fallback(self, executor):
        class SilentEngine:
            def generate(self, *args, **kwargs):
                return ''

        handler = ComponentHandler(SilentEngine(), executor)

        response = handler.show(ComponentType.RESUME, 'resume', [], ConversationMemory())

        assert response.follow_up.result(timeout=TIMEOUT).content.startswith('Click the download button above')


class TestChatSession:

    def test_profile_then_elaboration(self, session, llm):
        first = session.send('who are you')

        assert first.result.component_type == ComponentType.PROFILE
        replies = first.wait(timeout=TIMEOUT)
        assert [reply.content for reply in replies] == ["Here's my profile:", llm.reply]

        second = session.send('tell me more about that')

        assert second.result.intent_analysis.intent_type == IntentType.ELABORATION
        assert second.result.intent_analysis.recent_component_ref == ComponentType.PROFILE
        assert second.result.needs_context is True
        assert second.follow_up is None
        assert [reply.content for reply in second.wait(timeout=TIMEOUT)] == [llm.reply]
        elaboration_prompt = llm.prompts[-1]
        assert 'Component Context: Displayed profile details' in elaboration_prompt
        assert 'User Query: "tell me more about that"' in elaboration_prompt

        assert [message.role for message in session.messages] == ['user', 'assistant', 'assistant', 'user', 'assistant']

    def test_elaboration_falls_back_to_profile_reply(self, store, make_pool, rag_config, executor):
        engine = RAGEngine(store, make_pool(2), FailingLLM(), rag_config)
        session = ChatSession('session-2', engine, ComponentHandler(engine, executor))

        session.send('who are you').wait(timeout=TIMEOUT)
        turn = session.send('tell me more about that')

        assert turn.replies[0].content.startswith('**Techie by day, trekker by heart.**')

    def test_philosophical_uses_general_prompt(self, session, llm):
        turn = session.send('What is your approach to debugging?')

        assert turn.result.intent_analysis.intent_type == IntentType.PHILOSOPHICAL
        prompt = llm.prompts[-1]
        assert 'Current question: What is your approach to debugging?' in prompt
        assert 'USER INTENT: philosophical' in prompt
        assert 'QUERY CONTEXT: User is asking about work philosophy/approach' in prompt

    def test_duplicate_request_id_ignored(self, session):
        blocker = Future()

        class BlockingHandler:
            def show(self, component_type, content, chat_history, memory):
                return ComponentResponse(message=Message(role='assistant', content='shown'), follow_up=blocker)

        session.handler = BlockingHandler()

        assert session.send('who are you', request_id='req-1') is not None
        assert session.send('who are you', request_id='req-1') is None

        blocker.set_result(Message(role='assistant', content='follow up'))

        assert not session.tracker.is_in_flight('req-1')
        assert session.send('who are you', request_id='req-1') is not None

    def test_concurrent_sends_run_in_arrival_order(self, store, make_pool, rag_config, executor):
        llm = GatedLLM()
        engine = RAGEngine(store, make_pool(2), llm, rag_config)
        session = ChatSession('session-3', engine, ComponentHandler(engine, executor))

        first = threading.Thread(target=session.send, args=('where did you study',))
        first.start()
        assert llm.started.wait(TIMEOUT)

        second = threading.Thread(target=session.send, args=('what are your goals',))
        second.start()
        second.join(timeout=0.2)

        # The second turn waits for the first one to finish
        assert second.is_alive()
        assert len(llm.prompts) == 1

        llm.release.set()
        first.join(TIMEOUT)
        second.join(TIMEOUT)

        assert [(message.role, message.content) for message in session.messages] == [
            ('user', 'where did you study'),
            ('assistant', 'reply-1'),
            ('user', 'what are your goals'),
            ('assistant', 'reply-2'),
        ]
        assert 'assistant: reply-1' in llm.prompts[1]

    def test_reset(self, session):
        session.send('who are you').wait(timeout=TIMEOUT)

        session.reset()

        assert session.messages == []
        assert session.memory.get_last_shown_component() is None


class TestSessionRegistry:

    def test_sessions_are_isolated(self, engine, handler):
        registry = SessionRegistry(engine, handler)

        registry.get('a').send('who are you').wait(timeout=TIMEOUT)

        assert registry.get('a') is registry.get('a')
        assert registry.get('b').messages == []
        assert registry.get('b').memory.get_last_shown_component() is None
        assert registry.session_count == 2

    def test_reset_unknown_session(self, engine, handler):
        assert SessionRegistry(engine, handler).reset('missing') is False

    def test_reset_evicts_session(self, engine, handler):
        registry = SessionRegistry(engine, handler)
        session = registry.get('a')
        session.send('who are you').wait(timeout=TIMEOUT)

        assert registry.reset('a') is True

        assert registry.session_count == 0
        assert session.messages == []
        assert registry.get('a') is not session

    def test_idle_sessions_evicted(self, engine, handler):
        clock = FakeClock()
        registry = SessionRegistry(engine, handler, idle_timeout=600, clock=clock)
        idle = registry.get('idle')
        clock.advance(300)
        active = registry.get('active')
        clock.advance(400)

        assert registry.get('active') is active
        assert registry.session_count == 1
        assert registry.get('idle') is not idle
