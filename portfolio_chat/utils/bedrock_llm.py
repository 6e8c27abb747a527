"""
Amazon Bedrock LLM client wrapper with per-credential runtime clients.
"""

import threading
from typing import Dict, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..models.core import Credential
from .config import BedrockLLMConfig
from .logging_config import get_logger

logger = get_logger(__name__)


class BedrockLLMError(Exception):
    """Custom exception for Bedrock LLM errors."""
    pass


def parse_credential_secret(secret: str) -> Dict[str, str]:
    """Split an ``ACCESS_KEY_ID:SECRET_ACCESS_KEY[:SESSION_TOKEN]`` secret into boto3 client kwargs."""
    parts = secret.split(':', 2)
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise ValueError('Credential secret must look like ACCESS_KEY_ID:SECRET_ACCESS_KEY[:SESSION_TOKEN]')

    kwargs = {'aws_access_key_id': parts[0], 'aws_secret_access_key': parts[1]}
    if len(parts) == 3 and parts[2]:
        kwargs['aws_session_token'] = parts[2]
    return kwargs


class BedrockRuntimeClients:
    """Cache of bedrock-runtime clients, one per credential."""

    def __init__(self, region: str, request_timeout: float):
        self.region = region
        self.request_timeout = request_timeout
        self._clients = {}
        self._lock = threading.Lock()

    def get(self, credential: Credential):
        with self._lock:
            client = self._clients.get(credential.id)
            if client is None:
                client = boto3.client(
                    'bedrock-runtime',
                    region_name=self.region,
                    config=BotoConfig(
                        connect_timeout=self.request_timeout,
                        read_timeout=self.request_timeout,
                        retries={'max_attempts': 0}  # Credential pool handles retries
                    ),
                    **parse_credential_secret(credential.secret))
                self._clients[credential.id] = client
            return client


class BedrockLLM:
    """Amazon Bedrock LLM client. Each call runs with the credential it is given."""

    def __init__(self, config: BedrockLLMConfig):
        """
        Initialize Bedrock LLM client.

        Args:
            config: BedrockLLMConfig instance with connection parameters
        """
        self.config = config
        self.model_id = config.model_id
        self.clients = BedrockRuntimeClients(config.region, config.request_timeout)

        logger.info(f'Initialized Bedrock LLM client with model: {self.model_id}')

    def generate(self,
                 prompt: str,
                 credential: Credential,
                 max_tokens: Optional[int] = None,
                 temperature: Optional[float] = None) -> str:
        """
        Generate a completion for a single prompt.

        Args:
            prompt: Full prompt text
            credential: Credential to authenticate the call with
            max_tokens: Maximum tokens to generate (uses config default if None)
            temperature: Temperature for generation (uses config default if None)

        Returns:
            Generated text

        Raises:
            ClientError, BotoCoreError: Provider errors, left intact for status classification
            BedrockLLMError: On unexpected errors or an empty response
        """
        max_tokens = max_tokens or self.config.max_tokens
        temperature = self.config.temperature if temperature is None else temperature

        messages = [{'role': 'user', 'content': [{'text': prompt}]}]
        inf_params = {'maxTokens': max_tokens, 'temperature': temperature}

        try:
            response = self.clients.get(credential).converse(modelId=self.model_id,
                                                             messages=messages,
                                                             inferenceConfig=inf_params)
        except (ClientError, BotoCoreError):
            raise
        except Exception as e:
            logger.error(f'Unexpected error in Bedrock LLM: {e}')
            raise BedrockLLMError(f'Unexpected Bedrock LLM error: {e}')

        content = response.get('output', {}).get('message', {}).get('content', [])
        text = ''.join(block.get('text', '') for block in content)
        if not text.strip():
            raise BedrockLLMError('Bedrock LLM returned an empty response')

        logger.debug(f'Bedrock LLM response generated successfully (length: {len(text)})')
        return text

    def health_probe(self, credential: Credential) -> bool:
        """
        Trivial generation used to check whether a credential works again.

        Returns:
            True if the credential produced a response, False otherwise
        """
        try:
            response = self.generate('Hi', credential, max_tokens=10, temperature=0.0)
            return len(response.strip()) > 0

        except Exception as e:
            logger.error(f'Bedrock LLM health probe failed for credential {credential.id}: {e}')
            return False
