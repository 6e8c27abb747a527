"""
Shared pytest fixtures for the portfolio chat tests.

Provider calls are replaced by the fakes in tests.fixtures: a keyword-count embedding,
a recording text generator and a controllable clock. Nothing here touches the network.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from portfolio_chat.services.knowledge_store import KnowledgeStore
from portfolio_chat.services.rag_engine import RAGEngine
from portfolio_chat.utils.config import CredentialPoolConfig, RAGConfig
from portfolio_chat.utils.credential_pool import CredentialPool

from tests.fixtures.fakes import FakeClock, RecordingLLM, keyword_embed


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def pool_config() -> CredentialPoolConfig:
    return CredentialPoolConfig(requests_per_minute=15,
                                requests_per_day=1500,
                                cooldown_seconds=60,
                                wait_timeout=30,
                                poll_interval=1,
                                health_check_interval=300,
                                max_retries=3,
                                error_rate_threshold=0.5,
                                min_requests_for_disable=10,
                                credential_prefix='TEST_CREDENTIAL_',
                                credential_slots=10)


@pytest.fixture
def rag_config() -> RAGConfig:
    return RAGConfig(persona_name='Ansh Agrawal',
                     component_top_k=3,
                     general_top_k=4,
                     component_history=3,
                     general_history=4,
                     follow_up_delay=0.0,
                     follow_up_workers=2,
                     session_idle_timeout=3600)


@pytest.fixture
def make_pool(pool_config, clock):
    """Build a pool of n credentials on the fake clock."""

    def _make(count: int = 3, health_probe=None) -> CredentialPool:
        secrets = [f'AKIATEST{index}:secret{index}' for index in range(count)]
        return CredentialPool(secrets, pool_config, health_probe=health_probe, clock=clock, sleep=clock.sleep)

    return _make


@pytest.fixture
def store() -> KnowledgeStore:
    knowledge_store = KnowledgeStore(keyword_embed)
    knowledge_store.add_document('My work philosophy: users first, readable code, rapid iteration.',
                                 'Work Philosophy & Approach', 'philosophy')
    knowledge_store.add_document('Projects: Study Buddy, Exam Guard, Aarogya AI. Each project shipped fast.',
                                 'Detailed Projects & Achievements', 'projects')
    knowledge_store.add_document('Kedarnath trek, 22 km adventure with friends.', 'Hobbies & Interests', 'hobbies')
    knowledge_store.add_document('BTech education at Manipal University Jaipur.', 'Educational Background',
                                 'education')
    knowledge_store.add_document('Skills: React, Python, Flutter.', 'Professional Experience', 'experience')
    return knowledge_store


@pytest.fixture
def llm() -> RecordingLLM:
    return RecordingLLM()


@pytest.fixture
def engine(store, make_pool, llm, rag_config) -> RAGEngine:
    return RAGEngine(store, make_pool(2), llm, rag_config)


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=2)
    yield pool
    pool.shutdown(wait=True)
