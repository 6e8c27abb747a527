"""
Message routing: decides between showing a component and answering through RAG.
"""

from typing import Optional, Sequence

from ..models.core import ComponentType, IntentType, Message, ProcessingResult
from ..utils.logging_config import get_logger
from .conversation_memory import ConversationMemory
from .intent_analyzer import IntentAnalyzer

logger = get_logger(__name__)

MEMORY_UPDATE_WINDOW = 2


class MessageProcessor:
    """Routes user messages for one conversation."""

    def __init__(self, memory: ConversationMemory, analyzer: Optional[IntentAnalyzer] = None):
        """
        Initialize the processor.

        Args:
            memory: Conversation memory of the session being processed
            analyzer: IntentAnalyzer, the default rule set if None
        """
        self.memory = memory
        self.analyzer = analyzer or IntentAnalyzer()

    def process(self, message: str, chat_history: Sequence[Message]) -> ProcessingResult:
        """
        Route a user message.

        Args:
            message: User message text
            chat_history: Conversation before this message, oldest first

        Returns:
            ProcessingResult describing whether to show a component and whether to call RAG
        """
        logger.debug(f'Processing message: {message[:50]}')

        for recent in list(chat_history)[-MEMORY_UPDATE_WINDOW:]:
            self.memory.update_from_message(recent)

        analysis = self.analyzer.analyze(message, chat_history)

        if analysis.intent_type == IntentType.COMPONENT:
            # The component still gets a generated follow-up message
            result = ProcessingResult(should_show_component=True,
                                      component_type=analysis.component_type,
                                      should_use_rag=True,
                                      needs_context=analysis.needs_context,
                                      intent_analysis=analysis)
        elif analysis.intent_type == IntentType.ELABORATION:
            result = ProcessingResult(should_show_component=False,
                                      should_use_rag=True,
                                      needs_context=True,
                                      intent_analysis=analysis)
        elif analysis.intent_type == IntentType.PHILOSOPHICAL:
            result = ProcessingResult(should_show_component=False,
                                      should_use_rag=True,
                                      needs_context=False,
                                      intent_analysis=analysis)
        else:
            result = ProcessingResult(should_show_component=False,
                                      should_use_rag=True,
                                      needs_context=analysis.needs_context,
                                      intent_analysis=analysis)

        logger.debug(f'Processing result: {result.to_dict()}')
        return result

    def get_component_type(self, message: str) -> Optional[ComponentType]:
        """Component the message asks for when sent with no prior history."""
        result = self.process(message, [])
        return result.component_type if result.should_show_component else None

    def should_go_to_rag(self, message: str) -> bool:
        """True when the message, sent with no prior history, is answered by RAG alone."""
        result = self.process(message, [])
        return result.should_use_rag and not result.should_show_component
