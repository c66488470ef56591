"""
Built-in responder for tasks no provider handles.

Inspects token presence to pick a coarse topic bucket and returns a canned
sentence parameterized by the query, the registered tools and the active
mode's verbosity.
"""

import logging
from enum import Enum
from typing import Optional, Sequence

from .models import PerformanceMode, PerformanceModeConfig
from .patterns import contains_run
from .preprocessor import preprocess

logger = logging.getLogger("task-router.responder")

MIN_RESPONSE_LENGTH = 20


class Topic(str, Enum):
    GREETING = "greeting"
    CAPABILITY = "capability"
    WELLBEING = "wellbeing"
    AI = "ai"
    PROGRAMMING = "programming"
    DEFINITION = "definition"
    FALLBACK = "fallback"


def _stems(words: str) -> frozenset:
    return frozenset(preprocess(words))


def _run(phrase: str) -> tuple:
    return tuple(preprocess(phrase))


_GREETING_WORDS = _stems("hello hi hey greetings howdy")
_GREETING_RUNS = (_run("good morning"), _run("good evening"), _run("good afternoon"))
_CAPABILITY_WORDS = _stems("help capabilities")
_CAPABILITY_RUNS = (_run("what can you do"), _run("what do you do"))
_WELLBEING_RUNS = (_run("how are you"), _run("how do you feel"))
_AI_WORDS = _stems("ai ml tensorflow neural")
_AI_RUNS = (_run("machine learning"), _run("artificial intelligence"), _run("deep learning"))
_PROGRAMMING_WORDS = _stems("programming coding code software developer development python javascript")
_DEFINITION_OPENERS = _stems("explain define describe")
_DEFINITION_RUNS = (_run("what is"), _run("what are"), _run("who is"), _run("what does"))


def detect_topic(tokens: Sequence[str]) -> Topic:
    """Pick the topic bucket for a preprocessed token sequence."""
    token_set = set(tokens)
    if token_set & _GREETING_WORDS or any(contains_run(tokens, r) for r in _GREETING_RUNS):
        return Topic.GREETING
    if token_set & _CAPABILITY_WORDS or any(contains_run(tokens, r) for r in _CAPABILITY_RUNS):
        return Topic.CAPABILITY
    if any(contains_run(tokens, r) for r in _WELLBEING_RUNS):
        return Topic.WELLBEING
    if token_set & _AI_WORDS or any(contains_run(tokens, r) for r in _AI_RUNS):
        return Topic.AI
    if token_set & _PROGRAMMING_WORDS:
        return Topic.PROGRAMMING
    if tokens and (tokens[0] in _DEFINITION_OPENERS or any(contains_run(tokens, r) for r in _DEFINITION_RUNS)):
        return Topic.DEFINITION
    return Topic.FALLBACK


# topic -> mode -> template. Placeholders: {task} {subject} {tools}
_TEMPLATES = {
    Topic.GREETING: {
        PerformanceMode.FAST: "Hi! I'm your assistant. Ask me about {tools} or anything else!",
        PerformanceMode.BALANCED: (
            "Hello there! It's great to meet you. I can help with a wide range of topics, "
            "and I can look things up with {tools}. What would you like to explore today?"
        ),
        PerformanceMode.QUALITY: (
            "Greetings, and welcome! I'm an assistant that routes each request either to a "
            "specialised tool or to my own general knowledge.\n\n"
            "Right now I can consult {tools} for detailed lookups, and I can discuss "
            "programming, technology and AI concepts in general terms.\n\n"
            "I'm running in quality mode, so I'll give you my most thorough answers. "
            "How can I help you today?"
        ),
    },
    Topic.CAPABILITY: {
        PerformanceMode.FAST: "I answer general questions and can use {tools}. What do you need?",
        PerformanceMode.BALANCED: (
            "I'd be happy to help! I answer general questions, and when a request matches one "
            "of my tools ({tools}) I hand it over so you get precise data. What topic interests you?"
        ),
        PerformanceMode.QUALITY: (
            "Here is what I can do for you:\n\n"
            "**Tool-backed answers**: requests that mention {tools} are routed to the matching "
            "tool, which fetches live data.\n\n"
            "**General answers**: greetings, definitions, programming and AI questions are "
            "answered directly.\n\n"
            "**Performance modes**: fast mode keeps answers short, balanced mode is "
            "conversational, and quality mode adds similarity-based routing for phrasings "
            "that don't name a tool explicitly. What would you like to tackle first?"
        ),
    },
    Topic.WELLBEING: {
        PerformanceMode.FAST: "I'm doing great and ready to help. What's your question?",
        PerformanceMode.BALANCED: (
            "I'm doing wonderfully, thank you for asking! Everything is running smoothly and "
            "I'm ready for your questions. How are you doing today?"
        ),
        PerformanceMode.QUALITY: (
            "Thank you for asking! All of my components are healthy: the classifier is "
            "routing requests, the cache is serving repeated questions instantly and my "
            "tools ({tools}) are standing by.\n\n"
            "Every new conversation is a chance to be useful, so I'm glad you're here. "
            "How are you, and what brings you here today?"
        ),
    },
    Topic.AI: {
        PerformanceMode.FAST: "AI and machine learning let computers learn patterns from data instead of fixed rules.",
        PerformanceMode.BALANCED: (
            "AI and machine learning let systems learn patterns from data rather than follow "
            "rigid rules. I'm a small example myself: I classify your intent before deciding "
            "how to answer. What about AI interests you most?"
        ),
        PerformanceMode.QUALITY: (
            "Artificial intelligence and machine learning cover methods that let systems "
            "improve from data:\n\n"
            "- **Supervised learning** trains models on labelled examples.\n"
            "- **Unsupervised learning** finds structure in unlabelled data.\n"
            "- **Reinforcement learning** learns from feedback on actions.\n"
            "- **Deep learning** stacks neural network layers to learn rich representations.\n\n"
            "I use a lightweight version of these ideas: in quality mode I compare a "
            "bag-of-words vector of your request with reference vectors for each tool. "
            "Are you more interested in the theory, the tooling or practical applications?"
        ),
    },
    Topic.PROGRAMMING: {
        PerformanceMode.FAST: "Programming means writing instructions for computers. Popular languages include Python, JavaScript and Java.",
        PerformanceMode.BALANCED: (
            "Programming is the craft of turning ideas into instructions a computer can run. "
            "Whether it's web development, data science or automation, there's a language and "
            "ecosystem for it. What aspect of programming are you working on?"
        ),
        PerformanceMode.QUALITY: (
            "Programming combines logical rigour with creative problem solving. A useful map "
            "of the field:\n\n"
            "- **Foundations**: algorithms, data structures and complexity.\n"
            "- **Design**: modules, interfaces and testing.\n"
            "- **Ecosystems**: web services, data pipelines, mobile and embedded platforms.\n"
            "- **Practice**: version control, code review and continuous delivery.\n\n"
            "You asked: \"{task}\". Tell me which area you'd like to go deeper into and I'll "
            "tailor the explanation."
        ),
    },
    Topic.DEFINITION: {
        PerformanceMode.FAST: "Good question about {subject}. Ask me something more specific for a precise answer.",
        PerformanceMode.BALANCED: (
            "That's a great question about {subject}! I can offer a general overview, and for "
            "detailed lookups I rely on my tools ({tools}). Could you tell me which aspect "
            "of {subject} you care about most?"
        ),
        PerformanceMode.QUALITY: (
            "You asked: \"{task}\".\n\n"
            "A good definition of {subject} depends on the context you have in mind, such as "
            "its purpose, how it works and where it's used. I can walk through each of those, "
            "and if your question touches {tools}, I can fetch precise data for you.\n\n"
            "Which angle should I focus on so the answer is most useful to you?"
        ),
    },
    Topic.FALLBACK: {
        PerformanceMode.FAST: "Got it! I can help with \"{task}\", and I'm especially good with {tools}.",
        PerformanceMode.BALANCED: (
            "I appreciate you sharing \"{task}\" with me! I'm always happy to discuss a topic, "
            "and my tools ({tools}) can give you detailed answers. Is there something "
            "specific you'd like to explore together?"
        ),
        PerformanceMode.QUALITY: (
            "Thank you for sharing \"{task}\". I've looked at your request and it doesn't map "
            "onto any of my specialised tools ({tools}), so I'll answer from general knowledge.\n\n"
            "To give you the most valuable response, could you tell me which specific aspect "
            "you'd like me to explore in depth?"
        ),
    },
}

_DEFINITION_PREFIXES = ("what is ", "what are ", "who is ", "what does ", "explain ", "define ", "describe ")


def _subject(task: str) -> str:
    text = task.strip().rstrip("?.! ")
    lowered = text.lower()
    for prefix in _DEFINITION_PREFIXES:
        if lowered.startswith(prefix):
            text = text[len(prefix):]
            break
    return text or "that"


class GeneralResponder:
    """Produces general responses for tasks routed away from every tool."""

    def __init__(self, tool_names: Sequence[str] = ()) -> None:
        self.tool_names = list(tool_names)

    def _tools_phrase(self) -> str:
        if not self.tool_names:
            return "my built-in knowledge"
        return ", ".join(name.replace("_", " ") for name in self.tool_names)

    def respond(self, task: str, config: Optional[PerformanceModeConfig] = None) -> str:
        mode = config.mode if config is not None else PerformanceMode.BALANCED
        topic = detect_topic(preprocess(task))
        template = _TEMPLATES[topic][mode]
        response = template.format(task=task.strip(), subject=_subject(task), tools=self._tools_phrase())

        if len(response.strip()) < MIN_RESPONSE_LENGTH:
            raise RuntimeError(f"General response for topic '{topic.value}' is below minimum length")

        logger.debug(f"General response topic={topic.value} mode={mode.value}")
        return response
