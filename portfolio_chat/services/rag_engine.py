"""
Retrieval-augmented generation of chat replies.

Two prompt shapes are used: a component follow-up (what the user was just shown, plus
knowledge documents and the last few turns) and a general answer (knowledge documents,
recent turns, optional extra context and the question). Failures never reach the caller;
they turn into fallback text.
"""

from typing import Callable, List, Optional, Sequence

from ..models.core import ComponentContext, Credential, Document, IntentType, Message
from ..utils.config import RAGConfig
from ..utils.config import config as app_config
from ..utils.credential_pool import CredentialPool
from ..utils.logging_config import get_logger
from .component_context import build_component_context, get_component_fallback_response
from .knowledge_store import KnowledgeStore

logger = get_logger(__name__)

GENERIC_APOLOGY = 'Yo! Something went wrong on my end. Mind trying again?'

_INTENT_INSTRUCTIONS = {
    IntentType.ELABORATION: ('User wants more details about the recently shown component. Provide specific, '
                             'detailed information rather than showing new components.'),
    IntentType.PHILOSOPHICAL: ('User is asking a philosophical/opinion question. Provide thoughtful, personal '
                               'responses about work philosophy, approach, beliefs, etc.'),
    IntentType.COMPONENT: ('User requested to see a specific component. This message is a follow-up after '
                           'showing the component.'),
    IntentType.INFORMATIONAL: 'User wants general information. Use any available context to provide relevant details.',
}


def format_documents(documents: Sequence[Document]) -> str:
    """Render retrieved documents as `[title]: content` blocks."""
    return '\n\n'.join(f'[{document.title}]: {document.content}' for document in documents)


def format_history(messages: Sequence[Message], limit: int) -> str:
    """Render the last `limit` messages as `role: content` lines, oldest first."""
    recent = list(messages)[-limit:] if limit > 0 else []
    return '\n'.join(f'{message.role}: {message.content}' for message in recent)


def build_intent_context(component_context: Optional[ComponentContext] = None,
                         enhanced_context: Optional[str] = None,
                         intent_type: Optional[IntentType] = None) -> str:
    """
    Assemble the extra context passed to a general answer.

    Args:
        component_context: Component the conversation is currently about, if any
        enhanced_context: Memory-derived context text, if any
        intent_type: Classified intent of the user message

    Returns:
        Context text, empty when nothing is known
    """
    context = ''

    if component_context is not None:
        context += '\nCOMPONENT CONTEXT:\n'
        context += f'Component Type: {component_context.type.value}\n'
        context += f'Component Shown: {str(component_context.shown).lower()}\n'
        context += f'User Query: "{component_context.user_query}"\n'
        if component_context.available_projects:
            context += f"Available Projects: {', '.join(component_context.available_projects)}\n"
        if component_context.skill_categories:
            context += f"Skill Categories: {', '.join(component_context.skill_categories)}\n"
        if component_context.adventure_highlights:
            context += f"Adventure Highlights: {', '.join(component_context.adventure_highlights)}\n"

    if enhanced_context:
        context += f'\nENHANCED CONTEXT:\n{enhanced_context}\n'

    if intent_type is not None:
        context += f'\nUSER INTENT: {intent_type.value}\n'
        instruction = _INTENT_INSTRUCTIONS.get(intent_type)
        if instruction:
            context += f'INSTRUCTION: {instruction}\n'

    return context


class RAGEngine:
    """Answers queries from the knowledge store through the shared credential pool."""

    def __init__(self,
                 store: KnowledgeStore,
                 pool: CredentialPool,
                 llm_generate: Callable[[str, Credential], str],
                 rag_config: Optional[RAGConfig] = None):
        """
        Initialize the engine.

        Args:
            store: Knowledge store to retrieve documents from
            pool: Credential pool every generation call goes through
            llm_generate: Function generating text for a prompt with a given credential
            rag_config: Retrieval settings (uses global config if None)
        """
        self.store = store
        self.pool = pool
        self.llm_generate = llm_generate
        self.config = rag_config or app_config.rag

    def generate(self,
                 query: str,
                 chat_history: Sequence[Message],
                 component_context: Optional[ComponentContext] = None,
                 enhanced_context: Optional[str] = None) -> str:
        """
        Generate a reply.

        Args:
            query: Current user message
            chat_history: Conversation so far, oldest first
            component_context: Component just shown; selects the follow-up prompt when given
            enhanced_context: Extra context text for the general prompt

        Returns:
            Generated text, or fallback text if anything failed
        """
        if component_context is not None:
            return self.generate_component_follow_up(component_context, chat_history)
        return self.generate_answer(query, chat_history, enhanced_context)

    def generate_component_follow_up(self, component_context: ComponentContext, chat_history: Sequence[Message]) -> str:
        """Follow-up message for a component that was just shown."""
        try:
            documents = self.store.retrieve_top_k(f'{component_context.type.value} {component_context.user_query}',
                                                  self.config.component_top_k)
            prompt = self.build_component_prompt(component_context, documents, chat_history)
            return self._complete(prompt)
        except Exception as e:
            logger.error(f'Error generating {component_context.type.value} follow-up: {e}')
            return get_component_fallback_response(component_context)

    def generate_answer(self, query: str, chat_history: Sequence[Message], enhanced_context: Optional[str] = None) -> str:
        """General answer grounded on the knowledge store."""
        try:
            documents = self.store.retrieve_top_k(query, self.config.general_top_k)
            prompt = self.build_general_prompt(query, documents, chat_history, enhanced_context)
            return self._complete(prompt)
        except Exception as e:
            logger.error(f'Error generating response: {e}')
            return GENERIC_APOLOGY

    def build_component_prompt(self,
                               component_context: ComponentContext,
                               documents: List[Document],
                               chat_history: Sequence[Message]) -> str:
        component_type = component_context.type.value
        return f"""
{build_component_context(component_context)}

Relevant Knowledge Base:
{format_documents(documents)}

Recent Conversation:
{format_history(chat_history, self.config.component_history)}

Instructions:
- You just showed your {component_type} component to the user
- Generate a personalized, engaging follow-up response as {self.config.persona_name}
- Reference specific items that were shown in the component
- Add personal commentary, stories, or fun facts about the displayed content
- Keep it casual, friendly, and conversational
- Always end with an engaging question to continue the conversation
- Use **bold text** for emphasis
- Keep response to 2-3 sentences max
- Show genuine enthusiasm about your work
"""

    def build_general_prompt(self,
                             query: str,
                             documents: List[Document],
                             chat_history: Sequence[Message],
                             enhanced_context: Optional[str] = None) -> str:
        prompt = f"""
Context from knowledge base:
{format_documents(documents)}

Recent conversation:
{format_history(chat_history, self.config.general_history)}
"""
        if enhanced_context:
            prompt += f'\nAdditional Context:\n{enhanced_context}\n'

        prompt += f"""
Current question: {query}

Instructions:
- Respond as {self.config.persona_name} based on the context above
- Keep it casual, fun, and personal
- If the question is about philosophy, approach, goals, experience, or education, use the detailed info from the knowledge base
- If there's enhanced context about recently shown components, reference that information appropriately
- For elaboration requests about components, provide specific detailed stories
- For philosophical questions, give thoughtful personal responses
- Always end with a follow-up question to keep the conversation going
- Use **bold text** for emphasis instead of *italics*
- If you don't know something specific, just say so honestly
- Keep responses conversational and engaging
"""
        return prompt

    def _complete(self, prompt: str) -> str:
        text = self.pool.execute_with_retry(lambda credential: self.llm_generate(prompt, credential))
        if not text or not text.strip():
            raise ValueError('Empty response from model')
        return text.strip()
