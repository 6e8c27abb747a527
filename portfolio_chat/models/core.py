"""
Core data models for the portfolio chat routing and RAG system.
"""

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class ComponentType(str, Enum):
    """Pre-built UI panels the chat can show instead of generated text."""
    PROFILE = 'profile'
    PROJECTS = 'projects'
    SKILLS = 'skills'
    CONTACT = 'contact'
    RESUME = 'resume'
    FUN = 'fun'
    INTERNSHIP = 'internship'
    MORE = 'more'


class IntentType(str, Enum):
    """Classification of a user message."""
    COMPONENT = 'component'
    ELABORATION = 'elaboration'
    PHILOSOPHICAL = 'philosophical'
    INFORMATIONAL = 'informational'


def generate_message_id() -> str:
    """Unique message id: millisecond timestamp plus a random suffix."""
    return f'{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}'


@dataclass
class Credential:
    """One interchangeable API credential and its usage state."""
    id: str
    secret: str = field(repr=False)
    is_healthy: bool = True
    last_used_at: float = 0.0
    request_count: int = 0  # Since creation or last health-check reset
    error_count: int = 0
    daily_request_count: int = 0
    last_daily_reset: float = 0.0
    rate_limit_reset_at: float = 0.0
    minute_request_count: int = 0
    window_started_at: float = 0.0

    @property
    def error_rate(self) -> float:
        return self.error_count / self.request_count if self.request_count > 0 else 0.0


@dataclass
class Document:
    """A knowledge base entry with its precomputed embedding."""
    id: str
    content: str
    title: str
    type: str  # Category tag (system, philosophy, education, ...)
    embedding: List[float]
    created_at: datetime


@dataclass
class ComponentContext:
    """Structured facts about a component that was just shown."""
    type: ComponentType
    shown: bool
    user_query: str
    available_projects: Optional[List[str]] = None
    skill_categories: Optional[List[str]] = None
    adventure_highlights: Optional[List[str]] = None
    availability: Optional[str] = None
    interests: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {'type': self.type.value, 'shown': self.shown, 'userQuery': self.user_query}
        optional = {
            'availableProjects': self.available_projects,
            'skillCategories': self.skill_categories,
            'adventureHighlights': self.adventure_highlights,
            'availability': self.availability,
            'interests': self.interests,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ComponentContext':
        return cls(type=ComponentType(data['type']),
                   shown=bool(data.get('shown', False)),
                   user_query=data.get('userQuery', ''),
                   available_projects=data.get('availableProjects'),
                   skill_categories=data.get('skillCategories'),
                   adventure_highlights=data.get('adventureHighlights'),
                   availability=data.get('availability'),
                   interests=data.get('interests'))


@dataclass(frozen=True)
class Message:
    """One chat turn. Never mutated after creation."""
    role: str  # user | assistant
    content: str
    id: str = field(default_factory=generate_message_id)
    timestamp: datetime = field(default_factory=datetime.now)
    component_type: Optional[ComponentType] = None
    component_context: Optional[ComponentContext] = None

    @property
    def is_shown_component(self) -> bool:
        return (self.role == 'assistant' and self.component_type is not None and self.component_context is not None
                and self.component_context.shown)

    def to_dict(self) -> Dict[str, Any]:
        data = {'id': self.id, 'role': self.role, 'content': self.content, 'timestamp': self.timestamp.isoformat()}
        if self.component_type is not None:
            data['type'] = self.component_type.value
        if self.component_context is not None:
            data['componentContext'] = self.component_context.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Message':
        timestamp = data.get('timestamp')
        context = data.get('componentContext')
        return cls(role=data['role'],
                   content=data.get('content', ''),
                   id=data.get('id') or generate_message_id(),
                   timestamp=datetime.fromisoformat(timestamp) if timestamp else datetime.now(),
                   component_type=ComponentType(data['type']) if data.get('type') else None,
                   component_context=ComponentContext.from_dict(context) if context else None)


@dataclass
class ComponentMemory:
    """Record that a component type was shown in the conversation."""
    component_type: ComponentType
    associated_data: Dict[str, Any]
    shown_at: datetime
    triggering_query: str


@dataclass(frozen=True)
class IntentAnalysis:
    """Result of classifying one user message."""
    intent_type: IntentType
    confidence: float
    needs_context: bool
    component_type: Optional[ComponentType] = None
    recent_component_ref: Optional[ComponentType] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {'intentType': self.intent_type.value, 'confidence': self.confidence, 'needsContext': self.needs_context}
        if self.component_type is not None:
            data['componentType'] = self.component_type.value
        if self.recent_component_ref is not None:
            data['recentComponentRef'] = self.recent_component_ref.value
        return data


@dataclass(frozen=True)
class ProcessingResult:
    """Routing decision for one user message."""
    should_show_component: bool
    should_use_rag: bool
    needs_context: bool
    intent_analysis: IntentAnalysis
    component_type: Optional[ComponentType] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'shouldShowComponent': self.should_show_component,
            'shouldUseRAG': self.should_use_rag,
            'needsContext': self.needs_context,
            'intentAnalysis': self.intent_analysis.to_dict(),
        }
        if self.component_type is not None:
            data['componentType'] = self.component_type.value
        return data
