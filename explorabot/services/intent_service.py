"""
Rule-based intent engine: ordered regex intents with template responses.
Falls back to a keyword-bucket heuristic when no intent pattern matches.
"""

import random
import re
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from loguru import logger

FALLBACK_INTENT = "fallback"
WELCOME_INTENT = "welcome"

PatternLike = Union[str, "re.Pattern[str]"]


class IntentConfigError(ValueError):
    """Raised when the intent table cannot produce a response for some intent."""


# ─────────────────────────────────────────────────────────
#  DATA MODEL
# ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class IntentRule:
    name: str
    patterns: Tuple["re.Pattern[str]", ...]
    responses: Tuple[str, ...]

    @classmethod
    def build(
        cls,
        name: str,
        patterns: Iterable[PatternLike],
        responses: Iterable[str],
    ) -> "IntentRule":
        """Compile string patterns case-insensitively; compiled patterns are kept as given."""
        compiled = tuple(
            p if isinstance(p, re.Pattern) else re.compile(p, re.IGNORECASE)
            for p in patterns
        )
        return cls(name=name, patterns=compiled, responses=tuple(responses))

    def matches(self, text: str) -> bool:
        return any(p.search(text) for p in self.patterns)


@dataclass(frozen=True)
class ConversationTurn:
    role: str
    content: str
    timestamp: datetime
    intent: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.intent is not None:
            data["intent"] = self.intent
        return data


# ─────────────────────────────────────────────────────────
#  TEMPLATES
# ─────────────────────────────────────────────────────────

def welcome_template(bot_name: str = "EXPLORABOT") -> str:
    return (
        f"👋 Welcome to {bot_name}!\n\n"
        "I'm your AI assistant for building and deploying applications **without writing code**.\n\n"
        "**Try saying:**\n"
        "• \"Help me deploy an app\"\n"
        "• \"Create a REST API\"\n"
        "• \"Show me Docker commands\"\n"
        "• \"Mobile optimization tips\"\n\n"
        "Just describe what you need in plain English! 🚀"
    )


def default_intents(
    bot_name: str = "EXPLORABOT",
    version: str = "1.0.0",
    environment: str = "development",
) -> List[IntentRule]:
    """The stock intent table, in match-priority order."""
    return [
        IntentRule.build(
            "greeting",
            [r"^(hi|hello|hey|greetings)", r"^good (morning|afternoon|evening)"],
            [
                f"Hello! 👋 I'm {bot_name}, your AI assistant. How can I help you today?",
                "Hi there! I'm here to help you build and deploy applications without writing code. What would you like to create?",
                "Hey! Ready to explore? Ask me anything or describe what you'd like to build!",
            ],
        ),
        IntentRule.build(
            "help",
            [r"\b(help|assist|guide|support|what can you do)\b", r"how\s+to", r"^what"],
            [
                "🤖 **I can help you with:**\n\n"
                "• **Deploy Applications** - \"Deploy a web app\" or \"Set up Docker container\"\n"
                "• **Generate Code** - \"Create a REST API\" or \"Build a login form\"\n"
                "• **Explain Concepts** - \"What is CI/CD?\" or \"Explain microservices\"\n"
                "• **Configure Services** - \"Set up database\" or \"Configure environment\"\n"
                "• **Best Practices** - \"Mobile optimization tips\" or \"Security guidelines\"\n\n"
                "Just describe what you need in plain English!",
            ],
        ),
        IntentRule.build(
            "deploy",
            [r"\b(deploy|deployment|launch|publish|release)\b"],
            [
                "🚀 **Deployment Options:**\n\n"
                "1. **Docker** - Containerize and deploy locally\n"
                "2. **Railway** - One-click cloud deployment\n"
                "3. **Docker Compose** - Multi-service orchestration\n\n"
                "Tell me: \"Deploy with Docker\" or \"Set up Railway deployment\"",
            ],
        ),
        IntentRule.build(
            "code",
            # The lookahead pins the first keyword on each line and is never
            # re-entered, so repeated keywords cannot make the search quadratic.
            [re.compile(
                r"^(?=(.*?\b(?:code|generate|create|build|make|develop)\b))\1.*(?:app|api|form|page|component)",
                re.IGNORECASE | re.MULTILINE,
            )],
            [
                "💻 **Code Generation:**\n\n"
                "I can help you create:\n"
                "• Web pages and UI components\n"
                "• REST APIs and endpoints\n"
                "• Database schemas\n"
                "• Authentication systems\n"
                "• Mobile-responsive layouts\n\n"
                "What would you like me to generate?",
            ],
        ),
        IntentRule.build(
            "docker",
            [r"\b(docker|container|dockerfile|image)\b"],
            [
                "🐳 **Docker Commands:**\n\n"
                "```bash\n"
                "# Build container\n"
                "docker build -t explorabot .\n\n"
                "# Run container\n"
                "docker run -p 8080:8080 explorabot\n\n"
                "# Or use Docker Compose\n"
                "docker-compose up -d\n"
                "```\n\n"
                "Need help with a specific Docker task?",
            ],
        ),
        IntentRule.build(
            "mobile",
            [r"\b(mobile|responsive|phone|tablet|samsung|galaxy)"],
            [
                "📱 **Mobile Optimization:**\n\n"
                f"{bot_name} is optimized for Samsung Galaxy S24 FE:\n"
                "• 120Hz smooth animations\n"
                "• AMOLED dark theme\n"
                "• Touch-optimized controls\n"
                "• Offline support\n"
                "• Battery efficient\n\n"
                "See our [Mobile Platform Guidelines](/docs/MOBILE_PLATFORM_GUIDELINES.md)",
            ],
        ),
        IntentRule.build(
            "ai",
            [r"\b(ai|artificial intelligence|machine learning|ml|model|neural)\b"],
            [
                "🧠 **AI Capabilities:**\n\n"
                "• On-device AI inference\n"
                "• Model optimization for mobile\n"
                "• Natural language processing\n"
                "• Context-aware responses\n"
                "• Zero-code AI integration\n\n"
                "Learn more in our [AI Architect Persona](/docs/AI_ARCHITECT_PERSONA.md)",
            ],
        ),
        IntentRule.build(
            "status",
            [r"\b(status|health|running|online|check)\b"],
            [
                "✅ **System Status:**\n\n"
                "🟢 Bot is online and healthy\n"
                f"📊 Version: {version}\n"
                f"🌍 Environment: {environment}\n"
                "⚡ Ready to assist you!",
            ],
        ),
    ]


# ─────────────────────────────────────────────────────────
#  FALLBACK HEURISTIC
# ─────────────────────────────────────────────────────────

# Priority order matters: first bucket with any hit wins.
_FALLBACK_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("question", ("what", "how", "why", "when", "where", "who", "?")),
    ("technical", ("api", "database", "server", "config", "setup")),
    ("action", ("create", "make", "build", "generate", "show", "explain")),
)

_FALLBACK_TEMPLATES = {
    "question": (
        "🤔 Great question! I'm still learning about \"{input}\". \n\n"
        "Try asking about:\n"
        "• Deployment (\"How do I deploy?\")\n"
        "• Code generation (\"Create a REST API\")\n"
        "• Docker (\"Help with Docker\")\n"
        "• Mobile optimization (\"Mobile best practices\")"
    ),
    "technical": (
        "🔧 I can help with technical tasks!\n\n"
        "For \"{input}\", try being more specific:\n"
        "• \"Deploy with Docker\"\n"
        "• \"Create API endpoint\"\n"
        "• \"Set up database connection\"\n"
        "• \"Configure CI/CD pipeline\""
    ),
    "action": (
        "⚡ I'm ready to help you with that!\n\n"
        "To better assist with \"{input}\", please provide more details:\n"
        "• What type of application?\n"
        "• What features do you need?\n"
        "• Any specific requirements?"
    ),
    "general": (
        "💭 I understand you mentioned \"{input}\".\n\n"
        "I can help you with:\n"
        "• Deploying applications 🚀\n"
        "• Generating code 💻\n"
        "• Docker configuration 🐳\n"
        "• Mobile optimization 📱\n"
        "• AI integration 🧠\n\n"
        "Type \"help\" to see all my capabilities!"
    ),
}


def fallback_bucket(text: str) -> str:
    lower = text.lower()
    for bucket, keywords in _FALLBACK_KEYWORDS:
        if any(kw in lower for kw in keywords):
            return bucket
    return "general"


def fallback_response(text: str) -> str:
    # str.replace, not format(): user text may contain braces
    return _FALLBACK_TEMPLATES[fallback_bucket(text)].replace("{input}", text)


# ─────────────────────────────────────────────────────────
#  RESPONDER
# ─────────────────────────────────────────────────────────

class IntentResponder:
    """
    Maps a free-text message to a template response.

    Intents are scanned in declared order and the first one with any matching
    pattern wins. History and ``last_intent`` are recorded for inspection only;
    they never influence matching.
    """

    def __init__(
        self,
        intents: Optional[Sequence[IntentRule]] = None,
        rng: Optional[random.Random] = None,
        welcome: Optional[str] = None,
    ):
        if intents is None:
            intents = default_intents()
        self._intents = _validate(intents)
        self._rng = rng or random.Random()
        self._welcome = welcome if welcome is not None else welcome_template()
        self._lock = threading.Lock()
        self._last_intent: Optional[str] = None
        self._history: List[ConversationTurn] = []

    @property
    def intents(self) -> Tuple[IntentRule, ...]:
        return self._intents

    @property
    def welcome(self) -> str:
        return self._welcome

    @property
    def last_intent(self) -> Optional[str]:
        return self._last_intent

    def detect_intent(self, text: str) -> Optional[str]:
        for rule in self._intents:
            if rule.matches(text):
                return rule.name
        return None

    def classify(self, user_input: object = None) -> Tuple[str, str]:
        """Return ``(intent, response)`` without touching history."""
        if not isinstance(user_input, str) or not user_input:
            return WELCOME_INTENT, self._welcome

        text = user_input.strip()
        intent = self.detect_intent(text)
        if intent is not None:
            rule = next(r for r in self._intents if r.name == intent)
            logger.debug(f"Intent matched: {intent}")
            return intent, self._rng.choice(rule.responses)

        logger.debug(f"No intent matched, fallback bucket: {fallback_bucket(text)}")
        return FALLBACK_INTENT, fallback_response(text)

    def respond(self, user_input: object = None) -> Tuple[str, str]:
        """Like :meth:`process` but also returns the intent that produced the response."""
        content = user_input.strip() if isinstance(user_input, str) else ""
        with self._lock:
            intent, response = self.classify(user_input)
            self._record("user", content, None)
            self._record("assistant", response, intent)
            self._last_intent = intent
        return intent, response

    def process(self, user_input: object = None) -> str:
        return self.respond(user_input)[1]

    def get_history(self) -> Tuple[ConversationTurn, ...]:
        with self._lock:
            return tuple(self._history)

    def clear_context(self) -> None:
        with self._lock:
            self._last_intent = None
            self._history = []

    def _record(self, role: str, content: str, intent: Optional[str]) -> None:
        now = datetime.now(timezone.utc)
        if self._history and now < self._history[-1].timestamp:
            now = self._history[-1].timestamp
        self._history.append(ConversationTurn(role=role, content=content, timestamp=now, intent=intent))


def _validate(intents: Sequence[IntentRule]) -> Tuple[IntentRule, ...]:
    if not intents:
        raise IntentConfigError("Intent table is empty")
    seen = set()
    for rule in intents:
        if rule.name in seen:
            raise IntentConfigError(f"Duplicate intent '{rule.name}'")
        seen.add(rule.name)
        if not rule.responses:
            raise IntentConfigError(f"Intent '{rule.name}' has no responses")
    return tuple(intents)
