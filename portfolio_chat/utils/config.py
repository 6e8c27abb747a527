"""
Configuration management for Bedrock services, the credential pool and chat settings.
"""

import os
from dataclasses import dataclass
from typing import List

from dotenv import load_dotenv

load_dotenv()


@dataclass
class BedrockLLMConfig:
    """Configuration for Amazon Bedrock LLM service."""
    region: str
    model_id: str
    max_tokens: int
    temperature: float
    request_timeout: float


@dataclass
class BedrockEmbedConfig:
    """Configuration for Amazon Bedrock Embed service."""
    region: str
    model_id: str
    dimension: int
    request_timeout: float


@dataclass
class CredentialPoolConfig:
    """Configuration for credential rotation and rate limiting."""
    requests_per_minute: int
    requests_per_day: int
    cooldown_seconds: float
    wait_timeout: float
    poll_interval: float
    health_check_interval: float
    max_retries: int
    error_rate_threshold: float
    min_requests_for_disable: int
    credential_prefix: str
    credential_slots: int


@dataclass
class RAGConfig:
    """Configuration for retrieval and prompt assembly."""
    persona_name: str
    component_top_k: int
    general_top_k: int
    component_history: int
    general_history: int
    follow_up_delay: float
    follow_up_workers: int
    session_idle_timeout: float


@dataclass
class MCPConfig:
    """Configuration for MCP interface."""
    transport: str
    host: str
    port: int


@dataclass
class AppConfig:
    """Main application configuration."""
    environment: str
    log_level: str
    bedrock_llm: BedrockLLMConfig
    bedrock_embed: BedrockEmbedConfig
    credential_pool: CredentialPoolConfig
    rag: RAGConfig
    mcp: MCPConfig


def load_config() -> AppConfig:
    """Load configuration from environment variables with defaults."""
    environment = os.getenv('ENVIRONMENT', 'development')

    # Bedrock configuration
    bedrock_llm_config = BedrockLLMConfig(region=os.getenv('BEDROCK_LLM_AWS_REGION', 'us-east-1'),
                                          model_id=os.getenv('BEDROCK_LLM_MODEL_ID', 'anthropic.claude-3-haiku-20240307-v1:0'),
                                          max_tokens=int(os.getenv('BEDROCK_LLM_MAX_TOKENS', '1024')),
                                          temperature=float(os.getenv('BEDROCK_LLM_TEMPERATURE', '0.7')),
                                          request_timeout=float(os.getenv('BEDROCK_LLM_REQUEST_TIMEOUT', '30')))

    # Bedrock Embed configuration
    bedrock_embed_config = BedrockEmbedConfig(region=os.getenv('BEDROCK_EMBED_AWS_REGION', 'us-east-1'),
                                              model_id=os.getenv('BEDROCK_EMBED_MODEL_ID', 'amazon.titan-embed-text-v2:0'),
                                              dimension=int(os.getenv('BEDROCK_EMBED_DIMENSION', '1024')),
                                              request_timeout=float(os.getenv('BEDROCK_EMBED_REQUEST_TIMEOUT', '15')))

    # Credential pool configuration
    credential_pool_config = CredentialPoolConfig(
        requests_per_minute=int(os.getenv('CREDENTIAL_REQUESTS_PER_MINUTE', '15')),
        requests_per_day=int(os.getenv('CREDENTIAL_REQUESTS_PER_DAY', '1500')),
        cooldown_seconds=float(os.getenv('CREDENTIAL_COOLDOWN_SECONDS', '60')),
        wait_timeout=float(os.getenv('CREDENTIAL_WAIT_TIMEOUT', '30')),
        poll_interval=float(os.getenv('CREDENTIAL_POLL_INTERVAL', '1')),
        health_check_interval=float(os.getenv('CREDENTIAL_HEALTH_CHECK_INTERVAL', '300')),
        max_retries=int(os.getenv('CREDENTIAL_MAX_RETRIES', '3')),
        error_rate_threshold=float(os.getenv('CREDENTIAL_ERROR_RATE_THRESHOLD', '0.5')),
        min_requests_for_disable=int(os.getenv('CREDENTIAL_MIN_REQUESTS_FOR_DISABLE', '10')),
        credential_prefix=os.getenv('CREDENTIAL_ENV_PREFIX', 'BEDROCK_CREDENTIAL_'),
        credential_slots=int(os.getenv('CREDENTIAL_SLOTS', '10')))

    # RAG configuration
    rag_config = RAGConfig(persona_name=os.getenv('PERSONA_NAME', 'Ansh Agrawal'),
                           component_top_k=int(os.getenv('RAG_COMPONENT_TOP_K', '3')),
                           general_top_k=int(os.getenv('RAG_GENERAL_TOP_K', '4')),
                           component_history=int(os.getenv('RAG_COMPONENT_HISTORY', '3')),
                           general_history=int(os.getenv('RAG_GENERAL_HISTORY', '4')),
                           follow_up_delay=float(os.getenv('RAG_FOLLOW_UP_DELAY', '0')),
                           follow_up_workers=int(os.getenv('RAG_FOLLOW_UP_WORKERS', '4')),
                           session_idle_timeout=float(os.getenv('RAG_SESSION_IDLE_TIMEOUT', '3600')))

    # MCP configuration
    mcp_config = MCPConfig(transport=os.getenv('MCP_TRANSPORT', 'sse'),
                           host=os.getenv('MCP_HOST', '127.0.0.1'),
                           port=int(os.getenv('MCP_PORT', '8000')))

    return AppConfig(environment=environment,
                     log_level=os.getenv('LOG_LEVEL', 'INFO'),
                     bedrock_llm=bedrock_llm_config,
                     bedrock_embed=bedrock_embed_config,
                     credential_pool=credential_pool_config,
                     rag=rag_config,
                     mcp=mcp_config)


def load_credential_secrets(prefix: str = 'BEDROCK_CREDENTIAL_', max_slots: int = 10) -> List[str]:
    """Read numbered credential secrets (PREFIX1..PREFIXN) from the environment.

    Args:
        prefix: Environment variable prefix, the slot number is appended
        max_slots: Highest slot number to look at

    Returns:
        List of configured secrets in slot order, empty slots skipped
    """
    secrets = []
    for slot in range(1, max_slots + 1):
        value = os.getenv(f'{prefix}{slot}', '').strip()
        if value:
            secrets.append(value)
    return secrets


# Global configuration instance
config = load_config()
