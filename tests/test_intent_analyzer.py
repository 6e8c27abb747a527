"""
Tests for rule-based intent classification.
"""

import re

import pytest

from portfolio_chat.models.core import ComponentContext, ComponentType, IntentType, Message
from portfolio_chat.services.intent_analyzer import (ExactPhraseRule, IntentAnalyzer, KeywordCombinationRule, RegexRule,
                                                     analyze_intent, find_recent_component, normalize_for_matching)


def component_message(component_type: ComponentType, query: str = 'show me') -> Message:
    return Message(role='assistant',
                   content='Here it is:',
                   component_type=component_type,
                   component_context=ComponentContext(type=component_type, shown=True, user_query=query))


@pytest.fixture
def analyzer() -> IntentAnalyzer:
    return IntentAnalyzer()


class TestNormalization:

    def test_strips_punctuation_and_case(self):
        assert normalize_for_matching('  Show me   your SKILLS?! ') == 'show me your skills'

    def test_strips_apostrophes(self):
        assert normalize_for_matching("What's up") == 'whats up'


class TestComponentDetection:

    @pytest.mark.parametrize('message, expected', [
        ('Show me your skills?', ComponentType.SKILLS),
        ('who are you', ComponentType.PROFILE),
        ('Introduce yourself!', ComponentType.PROFILE),
        ('Can I see your resume', ComponentType.RESUME),
        ('How do I get in touch?', ComponentType.CONTACT),
        ('Are you open to an internship?', ComponentType.INTERNSHIP),
        ('What is the craziest thing you have done?', ComponentType.FUN),
        ('Any hobbies?', ComponentType.FUN),
        ('What have you developed recently', ComponentType.PROJECTS),
    ])
    def test_detects_component(self, analyzer, message, expected):
        result = analyzer.analyze(message, [])

        assert result.intent_type == IntentType.COMPONENT
        assert result.component_type == expected
        assert result.confidence == 0.9
        assert result.needs_context is False

    def test_component_beats_elaboration(self, analyzer):
        history = [component_message(ComponentType.FUN)]

        result = analyzer.analyze('tell me more about the projects', history)

        assert result.intent_type == IntentType.COMPONENT
        assert result.component_type == ComponentType.PROJECTS

    def test_no_component_for_plain_question(self, analyzer):
        assert analyzer.detect_component_request('where did you study') is None

    def test_custom_rules_evaluated_in_order(self):
        rules = [
            ExactPhraseRule(ComponentType.CONTACT, ('ping',)),
            RegexRule(ComponentType.FUN, (re.compile(r'ping'),)),
        ]
        analyzer = IntentAnalyzer(component_rules=rules)

        assert analyzer.detect_component_request('ping me') == ComponentType.CONTACT

    def test_keyword_combination_needs_both_parts(self):
        rule = KeywordCombinationRule(ComponentType.SKILLS, ('show',), re.compile(r'skills?'))

        assert rule.matches('show skill')
        assert not rule.matches('show me something')
        assert not rule.matches('skill')


class TestElaboration:

    def test_requires_recent_component(self, analyzer):
        result = analyzer.analyze('tell me more about that', [])

        assert result.intent_type == IntentType.INFORMATIONAL
        assert result.confidence == 0.6
        assert result.needs_context is False

    def test_fires_after_component(self, analyzer):
        result = analyzer.analyze('tell me more about that', [component_message(ComponentType.FUN)])

        assert result.intent_type == IntentType.ELABORATION
        assert result.recent_component_ref == ComponentType.FUN
        assert result.confidence == 0.85
        assert result.needs_context is True

    def test_component_outside_window_is_ignored(self, analyzer):
        history = [
            component_message(ComponentType.FUN),
            Message(role='assistant', content='follow up'),
            Message(role='user', content='ok'),
            Message(role='assistant', content='cool'),
        ]

        result = analyzer.analyze('tell me more about that', history)

        assert result.intent_type != IntentType.ELABORATION

    def test_unshown_component_does_not_count(self, analyzer):
        message = Message(role='assistant',
                          content='',
                          component_type=ComponentType.FUN,
                          component_context=ComponentContext(type=ComponentType.FUN, shown=False, user_query='x'))

        assert find_recent_component([message]) is None

    def test_component_specific_pattern(self):
        assert IntentAnalyzer.is_elaboration_request('how was kedarnath', ComponentType.FUN)
        assert not IntentAnalyzer.is_elaboration_request('how was kedarnath', ComponentType.SKILLS)


class TestPhilosophical:

    @pytest.mark.parametrize('message', [
        'What is your approach to debugging?',
        'What do you think about remote teams',
        'What do you believe in?',
        'How are you feeling today',
    ])
    def test_detects_philosophical(self, analyzer, message):
        result = analyzer.analyze(message, [])

        assert result.intent_type == IntentType.PHILOSOPHICAL
        assert result.confidence == 0.8
        assert result.needs_context is False

    def test_excluded_sentence_starter(self):
        assert not IntentAnalyzer.is_philosophical_question('what are you studying')


class TestInformational:

    def test_needs_context_with_recent_component(self, analyzer):
        result = analyzer.analyze('where did you study', [component_message(ComponentType.PROFILE)])

        assert result.intent_type == IntentType.INFORMATIONAL
        assert result.needs_context is True
        assert result.recent_component_ref is None

    def test_module_level_helper(self):
        assert analyze_intent('where did you study', []).intent_type == IntentType.INFORMATIONAL
