"""
Component catalog: canned lead-ins, prompt context blocks and fallback replies per component type.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..models.core import ComponentContext, ComponentType

# Facts kept in conversation memory for components that support elaboration
COMPONENT_DATA: Dict[str, Dict[str, Any]] = {
    'fun': {
        'adventures': ['Kedarnath Trek', 'Mountain Photography', 'Outdoor Adventures'],
        'highlights': {
            'kedarnath': {
                'description': 'Epic 22km trek to Kedarnath Temple',
                'challenges': 'High altitude, weather conditions, physical endurance',
                'experience': 'Life-changing spiritual and physical journey',
                'photos': 'Stunning mountain landscapes and temple views',
            }
        },
    },
    'projects': {
        'featured': ['Study Buddy', 'RAG Chatbot', 'AI Cheat Detection', 'Helping Vision'],
        'details': {
            'study_buddy': {
                'description': 'AI-powered study companion',
                'duration': '6 months development',
                'impact': 'Helped 200+ students',
                'tech': 'React, Python, AI/ML',
            }
        },
    },
    'skills': {
        'categories': ['Frontend', 'Backend', 'AI/ML', 'Tools'],
        'favorites': ['React', 'Python'],
        'expertise': 'React for UI magic, Python for AI wizardry',
    },
    'experience': {
        'hackathons': ['MUJ Hackathon Winner'],
        'achievements': ['24-hour coding marathon', 'AI project victory'],
        'professional': 'Student + Developer life in Gurgaon',
    },
}

PROFILE_STATUS = 'BTech Student at Manipal University Jaipur'
PROFILE_LOCATION = 'Gurgaon, Haryana'

GENERIC_FALLBACK = 'That was fun to show! Want to know more about me or something else?'

DEFAULT_PROJECT_BULLETS = '- Study Buddy\n- Aarogya AI\n- Exam Guard\n- DATAI\n- MUJeats\n- Agentic Chatbot System'
DEFAULT_SKILL_BULLETS = '- Full-stack Dev, AI/ML, Flutter, Cloud, DBs'
DEFAULT_ADVENTURE_BULLETS = '- Kedarnath trek (22 km)\n- Goa beach exploration on scooty'


@dataclass(frozen=True)
class ComponentSpec:
    """Canned behaviour of one component type."""
    lead_in: str
    follow_up_fallback: str
    context_fields: Dict[str, Any] = field(default_factory=dict)


COMPONENT_SPECS: Dict[ComponentType, ComponentSpec] = {
    ComponentType.PROFILE: ComponentSpec(
        lead_in="Here's my profile:",
        follow_up_fallback=("That's me in a nutshell! Currently living the student + developer life in Gurgaon. "
                            'What would you like to know more about?')),
    ComponentType.PROJECTS: ComponentSpec(
        lead_in='Here are some of my recent projects:',
        follow_up_fallback=('Hope you liked what you saw! Study Buddy is my baby - took 6 months but helped 200+ '
                            'students. Which project caught your eye?'),
        context_fields={'available_projects': ['Study Buddy', 'RAG Chatbot', 'AI Cheat Detection', 'Helping Vision']}),
    ComponentType.SKILLS: ComponentSpec(
        lead_in='Here are my skills and expertise:',
        follow_up_fallback=("That's my tech arsenal! React and Python are my favorites - React for the UI magic, "
                            "Python for AI wizardry. What's your go-to tech stack?"),
        context_fields={'skill_categories': ['Frontend', 'Backend', 'AI/ML', 'Tools']}),
    ComponentType.CONTACT: ComponentSpec(
        lead_in="Here's how you can reach me:",
        follow_up_fallback=("Let's connect! I'm always up for interesting conversations about tech, AI, or just life "
                            'in general. Feel free to reach out!')),
    ComponentType.RESUME: ComponentSpec(
        lead_in="Here's my resume - you can download it:",
        follow_up_fallback='Click the download button above to get my latest resume! Any specific role you have in mind?'),
    ComponentType.FUN: ComponentSpec(
        lead_in='Check out my adventures and crazy experiences:',
        follow_up_fallback=('That Kedarnath trek was absolutely incredible! Pure adventure at high altitude. '
                            'Do you enjoy trekking or outdoor adventures too?'),
        context_fields={'adventure_highlights': ['Kedarnath Trek', 'Mountain Photography', 'Outdoor Adventures']}),
    ComponentType.INTERNSHIP: ComponentSpec(
        lead_in="Here's my internship availability and what I'm looking for:",
        follow_up_fallback="I'm actively looking for summer 2026 internships! What kind of role are you working on?",
        context_fields={
            'availability': 'Summer 2026, Part-time',
            'interests': ['AI/ML', 'Full-stack Development', 'Startups'],
        }),
}

# Replies used when the follow-up generation fails
_FALLBACK_RESPONSES = {
    ComponentType.PROJECTS: ('**10+ projects** in my arsenal! My favs? **Study Buddy**, **Exam Guard**, and '
                             '**Aarogya AI**. Wanna dive into one?'),
    ComponentType.SKILLS: ("My toolkit's sharp - **React, Python, Gemini, Supabase, Flutter**, and more! "
                           'What tech are you into?'),
    ComponentType.FUN: ('Bro, that **Kedarnath trek** (22 km uphill madness) changed me. And Goa? Beaches + scooty '
                        '= unbeatable vibe. You into adventure?'),
    ComponentType.PROFILE: ('**Techie by day, trekker by heart.** Gurgaon boy, 20 y/o, living dev life with 10+ '
                            'projects and no regrets. What about you?'),
    ComponentType.CONTACT: 'Reach out on **LinkedIn, GitHub, or email** - I reply faster than a CI/CD pipeline deploys.',
    ComponentType.INTERNSHIP: "**Summer 2026 ready!** Full-stack, GenAI, product roles - send 'em my way!",
    ComponentType.RESUME: '**Updated resume** is one click away. Curious about anything specific inside?',
}


def get_component_data(component_type: ComponentType) -> Dict[str, Any]:
    """Facts stored in memory when a component is shown ({} for types without any)."""
    return COMPONENT_DATA.get(component_type.value, {})


def create_component_context(component_type: ComponentType, user_query: str) -> ComponentContext:
    """Build the structured context attached to a freshly shown component message."""
    spec = COMPONENT_SPECS.get(component_type)
    fields = dict(spec.context_fields) if spec else {}
    return ComponentContext(type=component_type, shown=True, user_query=user_query, **fields)


def _status(context: ComponentContext) -> str:
    return 'Displayed successfully' if context.shown else 'Tried but failed'


def _bullets(items: Optional[List[str]], default: str) -> str:
    if items:
        return '\n'.join(f'- {item}' for item in items)
    return default


def build_component_context(context: ComponentContext) -> str:
    """Render the prompt block describing what the user was just shown."""
    query_lines = f'User Query: "{context.user_query}"\nComponent Status: {_status(context)}\n'

    if context.type == ComponentType.PROJECTS:
        return (f'Component Context: Displayed projects showcase:\n'
                f'{_bullets(context.available_projects, DEFAULT_PROJECT_BULLETS)}\n\n'
                f'{query_lines}\n'
                'PROJECT CONTEXT:\n'
                '- Study Buddy: Voice AI learning tool (6 months dev)\n'
                '- Aarogya AI: Multilingual chatbot using RAG\n'
                '- Exam Guard: AI cheat detection (1st prize @ MUJ)\n'
                '- DATAI: Natural language to database tool\n'
                '- MUJeats: Flutter food ordering UI\n'
                '- Agentic Chatbot System: 3rd place @ Assesli, got interview offer\n\n'
                'Context: User saw interactive project cards with tech badges and achievements.\n')

    if context.type == ComponentType.SKILLS:
        return (f'Component Context: Displayed skills matrix:\n'
                f'{_bullets(context.skill_categories, DEFAULT_SKILL_BULLETS)}\n\n'
                f'{query_lines}\n'
                'SKILLS CONTEXT:\n'
                '- Loves React + Python\n'
                '- Good at building full-stack AI apps\n'
                '- Specializes in GenAI, Flutter, and Supabase\n\n'
                'Context: Skills section with icons, categories, and tech stack highlights.\n')

    if context.type == ComponentType.FUN:
        return (f'Component Context: Displayed adventure gallery:\n'
                f'{_bullets(context.adventure_highlights, DEFAULT_ADVENTURE_BULLETS)}\n\n'
                f'{query_lines}\n'
                'ADVENTURE CONTEXT:\n'
                '- Kedarnath Trek: 22 km trek, post-1st year, with 3 friends\n'
                '- Experience: Spiritual, intense, soul-touching\n'
                '- Goa: Finalist @ BITS Hackathon, beach-hopping on scooty\n\n'
                'Context: Fun section showing real-life adventures and crazy bits.\n')

    if context.type == ComponentType.PROFILE:
        return ('Component Context: Displayed profile details:\n'
                '- Student @ MUJ, CSE 3rd year\n'
                '- From Gurgaon, 8+ CGPA\n'
                '- Into full-stack, GenAI, adventures\n'
                '- Hobbies: Cricket, basketball, chess, pool, TT, console gaming, cars\n\n'
                f'{query_lines}\n'
                'Context: User saw intro card with story, academic track, and interests.\n')

    if context.type == ComponentType.CONTACT:
        return ('Component Context: Displayed contact info:\n'
                '- Email, GitHub, LinkedIn\n'
                '- Location: Gurgaon\n'
                '- Status: Open to internships/freelance\n\n'
                f'{query_lines}\n'
                'Context: User got clickable links to reach out on multiple platforms.\n')

    if context.type == ComponentType.INTERNSHIP:
        availability = f'- Availability: {context.availability}' if context.availability else '- Summer 2026, part-time anytime'
        interests = '\n'.join(f'- Interest: {interest}' for interest in context.interests or []) or \
            '- Full-stack, GenAI, startup vibes'
        return ('Component Context: Displayed internship availability:\n'
                f'{availability}\n{interests}\n\n'
                f'{query_lines}\n'
                "Context: Shared availability and roles I'm targeting with preferred work styles.\n")

    if context.type == ComponentType.RESUME:
        return ('Component Context: Resume download option displayed:\n'
                '- Updated resume with hackathons, projects, experience\n\n'
                f'{query_lines}\n'
                'Context: Resume card with link to downloadable PDF.\n')

    return f'Component Context: Displayed generic content for {context.type.value}\n{query_lines}'


def get_component_fallback_response(context: ComponentContext) -> str:
    """Deterministic reply used when the follow-up for a component cannot be generated."""
    return _FALLBACK_RESPONSES.get(context.type, GENERIC_FALLBACK)
