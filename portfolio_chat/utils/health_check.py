"""
Health check utilities for the application.
"""

from typing import Any, Dict

from ..services.knowledge_store import KnowledgeStore
from .config import config
from .credential_pool import CredentialPool
from .logging_config import get_logger

logger = get_logger(__name__)


def check_health(pool: CredentialPool, store: KnowledgeStore) -> bool:
    """Check the health of all system components.

    Args:
        pool: Shared credential pool
        store: Knowledge store

    Returns:
        True if all components are healthy, False otherwise
    """
    try:
        health_status = get_health_status(pool, store)

        all_healthy = all(status.get('healthy', False) for status in health_status.values())

        if all_healthy:
            logger.info('All system components are healthy')
        else:
            logger.warning('Some system components are unhealthy')

        return all_healthy

    except Exception as e:
        logger.error(f'Health check failed: {e}')
        return False


def get_health_status(pool: CredentialPool, store: KnowledgeStore) -> Dict[str, Any]:
    """Get detailed health status of all components.

    Args:
        pool: Shared credential pool
        store: Knowledge store

    Returns:
        Dictionary with health status of each component
    """
    health_status = {}

    try:
        healthy_keys = pool.get_healthy_key_count()
        health_status['credential_pool'] = {
            'healthy': healthy_keys > 0,
            'service': 'Amazon Bedrock credential pool',
            'healthy_keys': healthy_keys,
            'total_keys': len(pool.credentials),
            'model': config.bedrock_llm.model_id
        }
    except Exception as e:
        health_status['credential_pool'] = {'healthy': False, 'service': 'Amazon Bedrock credential pool',
                                            'error': str(e)}

    try:
        document_count = store.document_count
        health_status['knowledge_store'] = {
            'healthy': document_count > 0,
            'service': 'Knowledge store',
            'documents': document_count,
            'embedding_model': config.bedrock_embed.model_id
        }
    except Exception as e:
        health_status['knowledge_store'] = {'healthy': False, 'service': 'Knowledge store', 'error': str(e)}

    return health_status


def get_system_info(pool: CredentialPool, store: KnowledgeStore) -> Dict[str, Any]:
    """Get system information and configuration.

    Returns:
        Dictionary with system information
    """
    return {
        'service_name': 'PortfolioChat',
        'version': '1.0.0',
        'configuration': {
            'bedrock_llm_model': config.bedrock_llm.model_id,
            'bedrock_embed_model': config.bedrock_embed.model_id,
            'aws_region': config.bedrock_llm.region,
            'requests_per_minute': config.credential_pool.requests_per_minute,
            'requests_per_day': config.credential_pool.requests_per_day
        },
        'health_status': get_health_status(pool, store)
    }
