"""
Rule-based intent classification of user messages.

Rules are evaluated in a fixed priority order and the first match wins:
component request (0.9), elaboration of a recently shown component (0.85),
philosophical/opinion question (0.8), informational default (0.6).
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Sequence, Tuple, Union

from ..models.core import ComponentType, IntentAnalysis, IntentType, Message
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

COMPONENT_CONFIDENCE = 0.9
ELABORATION_CONFIDENCE = 0.85
PHILOSOPHICAL_CONFIDENCE = 0.8
INFORMATIONAL_CONFIDENCE = 0.6

RECENT_COMPONENT_WINDOW = 3

_PUNCTUATION = re.compile(r'[\'"?!.,;:()]+')
_WHITESPACE = re.compile(r'\s+')


def normalize_whitespace(text: str) -> str:
    """Lowercase, trim and collapse runs of whitespace."""
    return _WHITESPACE.sub(' ', text.lower()).strip()


def normalize_for_matching(text: str) -> str:
    """Lowercase and strip punctuation (quotes and apostrophes included), then collapse whitespace."""
    return _WHITESPACE.sub(' ', _PUNCTUATION.sub('', text.lower())).strip()


@dataclass(frozen=True)
class ExactPhraseRule:
    """Matches when any trigger phrase occurs in the normalized message."""
    component_type: ComponentType
    phrases: Tuple[str, ...]

    def matches(self, text: str) -> bool:
        return any(normalize_for_matching(phrase) in text for phrase in self.phrases)


@dataclass(frozen=True)
class RegexRule:
    """Matches when any pattern is found in the normalized message."""
    component_type: ComponentType
    patterns: Tuple[Pattern, ...]

    def matches(self, text: str) -> bool:
        return any(pattern.search(text) for pattern in self.patterns)


@dataclass(frozen=True)
class KeywordCombinationRule:
    """Matches when an action keyword and a component noun both occur."""
    component_type: ComponentType
    action_keywords: Tuple[str, ...]
    noun_pattern: Pattern

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.action_keywords) and bool(self.noun_pattern.search(text))


ComponentRule = Union[ExactPhraseRule, RegexRule, KeywordCombinationRule]


def _compile(*patterns: str) -> Tuple[Pattern, ...]:
    return tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns)


ACTION_KEYWORDS = ('show', 'display', 'see', 'view', 'check out', 'take a look')

ELABORATION_KEYWORDS = ('tell me more', 'explain', 'elaborate', 'details', 'about that', 'how did',
                        'what happened', 'describe', 'more about', 'can you tell me more')

CONTEXT_KEYWORDS = ('that', 'this', 'the one', 'mentioned', 'above', 'shown')

PHILOSOPHICAL_KEYWORDS = ('philosophy', 'approach', 'opinion', 'think about', 'believe', 'feel about',
                          'thoughts on', 'perspective')

PHILOSOPHICAL_PATTERNS = _compile(
    r'^what are you(?!\s*(?:working on|building|doing|studying|learning|planning|skilled))',
    r'^how are you(?!\s*(?:different|building|working|doing))',
    r'^why are you(?!\s*(?:interested|passionate|good))',
    r'^what do you think about',
    r"^what's your opinion on",
    r'^how do you feel about',
    r'work philosophy',
    r'approach to',
    r'believe in',
)

ELABORATION_PATTERNS: Dict[ComponentType, Tuple[Pattern, ...]] = {
    ComponentType.FUN: _compile(r'tell me about.*trek|how was.*kedarnath|what happened.*mountain|describe.*adventure'),
    ComponentType.PROJECTS: _compile(
        r'tell me about.*study buddy|how did you build|what was.*challenging|describe.*development'),
    ComponentType.SKILLS: _compile(
        r"how did you learn|tell me about.*react|what's your experience.*python|describe your.*development"),
    ComponentType.PROFILE: _compile(
        r"tell me more about yourself|what's your story|describe your journey|how did you get into"),
}

# Evaluation order matters: direct phrases, then semantic patterns, then action + noun fallback
COMPONENT_RULES: List[ComponentRule] = [
    ExactPhraseRule(ComponentType.PROFILE, ('profile', 'who are you', 'about you', 'introduce yourself')),
    ExactPhraseRule(ComponentType.PROJECTS, ('projects', 'portfolio', 'your work', 'what have you built')),
    ExactPhraseRule(ComponentType.SKILLS, ('skills', 'your skills', 'technical skills')),
    ExactPhraseRule(ComponentType.CONTACT, ('contact', 'email', 'get in touch', 'reach you')),
    ExactPhraseRule(ComponentType.RESUME, ('resume', 'cv')),
    ExactPhraseRule(ComponentType.INTERNSHIP, ('internship', 'availability', 'hiring', 'job opportunity')),
    RegexRule(ComponentType.FUN, _compile(
        r'craziest.*(?:thing|adventure|experience)',
        r'wildest.*(?:thing|adventure|experience)',
        r'most.*(?:epic|crazy|wild|fun|adventurous)',
        r'(?:adventure|crazy|wild|epic).*(?:story|experience|thing)',
        r'(?:hobbies|activities|adventures)',
        r'(?:trekking|hiking|climbing|outdoor)',
        r'fun.*(?:stuff|things|activities|photos)',
        r'(?:show|tell).*(?:adventure|fun|crazy|epic)',
    )),
    RegexRule(ComponentType.PROJECTS, _compile(
        r'(?:show|tell|see).*(?:projects|work|portfolio)',
        r'what.*(?:built|created|developed|worked on)',
        r'(?:projects|portfolio|work)',
    )),
    RegexRule(ComponentType.SKILLS, _compile(
        r'(?:show|tell|list).*skills',
        r'what.*(?:skills|technologies|programming)',
        r'(?:technical|programming).*skills',
    )),
    KeywordCombinationRule(ComponentType.PROJECTS, ACTION_KEYWORDS, re.compile(r'projects?|portfolio|work|built')),
    KeywordCombinationRule(ComponentType.SKILLS, ACTION_KEYWORDS, re.compile(r'skills?')),
    KeywordCombinationRule(ComponentType.PROFILE, ACTION_KEYWORDS, re.compile(r'profile|about')),
    KeywordCombinationRule(ComponentType.CONTACT, ACTION_KEYWORDS, re.compile(r'contact|email')),
    KeywordCombinationRule(ComponentType.RESUME, ACTION_KEYWORDS, re.compile(r'resume|cv')),
    KeywordCombinationRule(ComponentType.FUN, ACTION_KEYWORDS, re.compile(r'adventure|fun|photos|crazy|wild')),
]


def find_recent_component(messages: Sequence[Message], window: int = RECENT_COMPONENT_WINDOW) -> Optional[Message]:
    """Most recent shown component message among the last `window` messages."""
    for message in reversed(list(messages)[-window:]):
        if message.is_shown_component:
            return message
    return None


class IntentAnalyzer:
    """Classifies a message given the recent conversation. Stateless."""

    def __init__(self, component_rules: Optional[List[ComponentRule]] = None):
        self.component_rules = component_rules if component_rules is not None else COMPONENT_RULES

    def detect_component_request(self, message: str) -> Optional[ComponentType]:
        """Component explicitly requested by the message, if any."""
        text = normalize_for_matching(message)
        for rule in self.component_rules:
            if rule.matches(text):
                return rule.component_type
        return None

    @staticmethod
    def is_elaboration_request(message: str, component_type: ComponentType) -> bool:
        text = normalize_whitespace(message)
        if any(keyword in text for keyword in ELABORATION_KEYWORDS):
            return True
        if any(keyword in text for keyword in CONTEXT_KEYWORDS):
            return True
        return any(pattern.search(text) for pattern in ELABORATION_PATTERNS.get(component_type, ()))

    @staticmethod
    def is_philosophical_question(message: str) -> bool:
        text = normalize_whitespace(message)
        if any(keyword in text for keyword in PHILOSOPHICAL_KEYWORDS):
            return True
        return any(pattern.search(text) for pattern in PHILOSOPHICAL_PATTERNS)

    def analyze(self, message: str, recent_messages: Sequence[Message]) -> IntentAnalysis:
        """
        Classify a user message.

        Args:
            message: Raw user message
            recent_messages: Conversation so far, oldest first

        Returns:
            IntentAnalysis for the message
        """
        recent_component = find_recent_component(recent_messages)

        component_type = self.detect_component_request(message)
        if component_type is not None:
            return IntentAnalysis(intent_type=IntentType.COMPONENT,
                                  component_type=component_type,
                                  confidence=COMPONENT_CONFIDENCE,
                                  needs_context=False)

        if recent_component is not None and self.is_elaboration_request(message, recent_component.component_type):
            return IntentAnalysis(intent_type=IntentType.ELABORATION,
                                  confidence=ELABORATION_CONFIDENCE,
                                  needs_context=True,
                                  recent_component_ref=recent_component.component_type)

        if self.is_philosophical_question(message):
            return IntentAnalysis(intent_type=IntentType.PHILOSOPHICAL,
                                  confidence=PHILOSOPHICAL_CONFIDENCE,
                                  needs_context=False)

        logger.debug(f'No specific intent matched, treating as informational: {message[:50]}')
        return IntentAnalysis(intent_type=IntentType.INFORMATIONAL,
                              confidence=INFORMATIONAL_CONFIDENCE,
                              needs_context=recent_component is not None)


_default_analyzer = IntentAnalyzer()


def analyze_intent(message: str, recent_messages: Sequence[Message]) -> IntentAnalysis:
    """Classify a message with the default rule set."""
    return _default_analyzer.analyze(message, recent_messages)
