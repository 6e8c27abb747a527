"""
MCP Interface Layer using fastmcp for the portfolio chat.
"""
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from fastmcp import FastMCP

from .models.core import Credential
from .services.chat_session import SessionRegistry
from .services.component_handler import ComponentHandler
from .services.knowledge_base import seed_knowledge_base
from .services.knowledge_store import KnowledgeStore
from .services.rag_engine import RAGEngine
from .utils.bedrock_embed import BedrockEmbed
from .utils.bedrock_llm import BedrockLLM
from .utils.config import AppConfig, config, load_credential_secrets
from .utils.credential_pool import CredentialPool
from .utils.health_check import get_health_status, get_system_info
from .utils.logging_config import get_logger

logger = get_logger(__name__)

FOLLOW_UP_TIMEOUT = 120

# Initialize FastMCP application
mcp = FastMCP('Portfolio Chat')


@dataclass
class ChatServices:
    """Objects shared by every chat session."""
    pool: CredentialPool
    store: KnowledgeStore
    engine: RAGEngine
    registry: SessionRegistry
    executor: ThreadPoolExecutor


def build_services(app_config: AppConfig = config,
                   secrets: Optional[List[str]] = None,
                   llm_generate: Optional[Callable[[str, Credential], str]] = None,
                   embed: Optional[Callable[[str, Credential], List[float]]] = None,
                   health_probe: Optional[Callable[[Credential], bool]] = None) -> ChatServices:
    """Wire the credential pool, knowledge store, RAG engine and session registry.

    Args:
        app_config: Application configuration
        secrets: Credential secrets (read from the environment if None)
        llm_generate: Text generation function (Bedrock Converse if None)
        embed: Embedding function (Bedrock embedding model if None)
        health_probe: Credential health probe (Bedrock LLM probe if None)

    Returns:
        ChatServices with a seeded knowledge store

    Raises:
        CredentialConfigError: If no credential is configured
        KnowledgeStoreError: If the knowledge base cannot be embedded
    """
    pool_config = app_config.credential_pool
    if secrets is None:
        secrets = load_credential_secrets(pool_config.credential_prefix, pool_config.credential_slots)

    if llm_generate is None or health_probe is None:
        llm = BedrockLLM(app_config.bedrock_llm)
        llm_generate = llm_generate or llm.generate
        health_probe = health_probe or llm.health_probe
    if embed is None:
        embed = BedrockEmbed(app_config.bedrock_embed).embed

    pool = CredentialPool(secrets, pool_config, health_probe=health_probe)
    store = KnowledgeStore(lambda text: pool.execute_with_retry(lambda credential: embed(text, credential)))
    seed_knowledge_base(store)

    engine = RAGEngine(store, pool, llm_generate, app_config.rag)
    executor = ThreadPoolExecutor(max_workers=app_config.rag.follow_up_workers, thread_name_prefix='follow-up')
    handler = ComponentHandler(engine, executor, follow_up_delay=app_config.rag.follow_up_delay)

    registry = SessionRegistry(engine, handler, idle_timeout=app_config.rag.session_idle_timeout)

    return ChatServices(pool=pool, store=store, engine=engine, registry=registry, executor=executor)


_services: Optional[ChatServices] = None
_services_lock = threading.Lock()


def get_services() -> ChatServices:
    """Shared services, built on first use."""
    global _services
    with _services_lock:
        if _services is None:
            _services = build_services()
        return _services


@mcp.tool()
def chat(session_id: str, message: str, request_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Send a message to a chat session.

    Args:
        session_id: Chat session ID
        message: User message
        request_id: Client request ID used to drop duplicate submissions (optional)

    Returns:
        Assistant messages of the turn, component follow-up included

    Raises:
        Exception: If the chat fails
    """

    try:
        if not session_id or not session_id.strip():
            raise ValueError('Session ID is required')

        if not message or not message.strip():
            return []

        session = get_services().registry.get(session_id)
        turn = session.send(message.strip(), request_id)
        if turn is None:
            return []

        replies = turn.wait(timeout=FOLLOW_UP_TIMEOUT)

        logger.debug(f'MCP chat returned {len(replies)} messages for session {session_id}')
        return [reply.to_dict() for reply in replies]

    except Exception as e:
        logger.error(f'Unexpected error in MCP chat: {e}')
        raise Exception(f'Chat failed: {e}')


@mcp.tool()
def route_message(session_id: str, message: str) -> Dict[str, Any]:
    """Classify a message against a session's conversation without generating a reply.

    Args:
        session_id: Chat session ID
        message: User message

    Returns:
        Routing decision
    """

    try:
        if not session_id or not session_id.strip():
            raise ValueError('Session ID is required')

        session = get_services().registry.get(session_id)
        return session.processor.process(message, session.messages).to_dict()

    except Exception as e:
        logger.error(f'Unexpected error in MCP route: {e}')
        raise Exception(f'Routing failed: {e}')


@mcp.tool()
def reset_session(session_id: str) -> bool:
    """Clear a chat session's history and memory.

    Args:
        session_id: Chat session ID

    Returns:
        True if the session existed
    """
    return get_services().registry.reset(session_id)


@mcp.tool()
def credential_stats() -> Dict[str, Any]:
    """Usage statistics of the credential pool."""
    pool = get_services().pool
    return {'healthyKeys': pool.get_healthy_key_count(), 'keys': pool.get_key_stats()}


@mcp.tool()
def health_status() -> Dict[str, Any]:
    """Health of the credential pool and knowledge store."""
    services = get_services()
    return get_system_info(services.pool, services.store)


def shutdown_services(services: ChatServices) -> None:
    """Stop background health checks and the follow-up workers."""
    services.pool.stop_health_checks()
    services.executor.shutdown(wait=True, cancel_futures=True)
    logger.info('Chat services stopped')


def main() -> None:
    """Run the MCP server."""
    services = get_services()
    services.pool.start_health_checks()
    logger.info(f'Component health: {get_health_status(services.pool, services.store)}')

    transport = config.mcp.transport
    host = config.mcp.host
    port = config.mcp.port
    try:
        mcp.run(transport=transport, host=host, port=port)
    finally:
        shutdown_services(services)


if __name__ == '__main__':
    main()
