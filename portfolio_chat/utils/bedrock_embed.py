"""
Amazon Bedrock embedding client wrapper with per-credential runtime clients.
"""

import json
from typing import List

from botocore.exceptions import BotoCoreError, ClientError

from ..models.core import Credential
from .bedrock_llm import BedrockRuntimeClients
from .config import BedrockEmbedConfig
from .logging_config import get_logger

logger = get_logger(__name__)


class BedrockEmbedError(Exception):
    """Custom exception for Bedrock embedding errors."""
    pass


class BedrockEmbed:
    """Amazon Bedrock embedding client. Each call runs with the credential it is given."""

    def __init__(self, config: BedrockEmbedConfig):
        """
        Initialize Bedrock embedding client.

        Args:
            config: BedrockEmbedConfig instance with connection parameters
        """
        self.config = config
        self.model_id = config.model_id
        self.output_embedding_length = config.dimension
        self.clients = BedrockRuntimeClients(config.region, config.request_timeout)

        if 'cohere' in self.model_id.lower() and self.output_embedding_length != 1024:
            raise BedrockEmbedError(f'Cohere models only support 1024 dimensions, got {self.output_embedding_length}')

        logger.info(f'Initialized Bedrock Embed client with model: {self.model_id}')

    def _request_body(self, text: str) -> dict:
        if 'titan' in self.model_id.lower():
            return {'inputText': text, 'dimensions': self.output_embedding_length}
        elif 'cohere' in self.model_id.lower():
            return {'input_type': 'search_document', 'texts': [text]}
        raise BedrockEmbedError(f'Unsupported model for embedding: {self.model_id}')

    def embed(self, text: str, credential: Credential) -> List[float]:
        """
        Generate an embedding for text.

        Args:
            text: Text to embed
            credential: Credential to authenticate the call with

        Returns:
            List of embedding values

        Raises:
            ClientError, BotoCoreError: Provider errors, left intact for status classification
            BedrockEmbedError: If the model is unsupported or the response is malformed
        """
        if not text or not text.strip():
            logger.warning('Empty text provided for embedding')
            return [0.0] * self.output_embedding_length

        body = json.dumps(self._request_body(text))

        try:
            response = self.clients.get(credential).invoke_model(body=body,
                                                                 modelId=self.model_id,
                                                                 accept='application/json',
                                                                 contentType='application/json')
            result = json.loads(response.get('body').read())
        except (ClientError, BotoCoreError):
            raise
        except Exception as e:
            logger.error(f'Unexpected error in Bedrock Embed: {e}')
            raise BedrockEmbedError(f'Unexpected Bedrock Embed error: {e}')

        if 'embedding' in result:
            embedding = result['embedding']
        else:
            embeddings = result.get('embeddings') or []
            embedding = embeddings[0] if embeddings else None

        if not embedding or len(embedding) != self.output_embedding_length:
            raise BedrockEmbedError(f'Bedrock Embed returned an invalid embedding for model {self.model_id}')

        logger.debug('Bedrock Embed request successful')
        return embedding
