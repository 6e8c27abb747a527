"""
Portfolio chat: intent routing, conversation memory and multi-credential RAG over Amazon Bedrock.
"""

# Package loggers are configured once, on import
from .utils.logging_config import setup_logging

setup_logging()
