"""
Analysis prompt defaults and validation.
"""

import re
from dataclasses import dataclass, field

MIN_PROMPT_LENGTH = 50
MAX_PROMPT_LENGTH = 8000

# A prompt should ask for some kind of analysis
ANALYSIS_KEYWORDS = ("analy", "summar", "report", "assess", "evaluat", "review")

# Instructions the bot must refuse to store
HARMFUL_PATTERNS = [
    re.compile(
        r"(collect|obtain|extract|gather|harvest).*personal (information|data|details)",
        re.IGNORECASE,
    ),
    re.compile(
        r"personal (information|data|details).*(collect|obtain|extract|gather|harvest)",
        re.IGNORECASE,
    ),
    re.compile(r"(expose|reveal|leak|disclose).*secret", re.IGNORECASE),
    re.compile(r"secret.*(expose|reveal|leak|disclose)", re.IGNORECASE),
    re.compile(r"defam|slander|harass", re.IGNORECASE),
    re.compile(r"(offensive|abusive|hateful).*content", re.IGNORECASE),
]

DEFAULT_ANALYSIS_PROMPT = """You are an expert in analysing chat communities. Analyse the conversation data provided and write a thorough report covering:

1. **Community activity**
   - Message count and active users
   - Activity per channel
   - Distribution by hour of day

2. **Conversation trends and topics**
   - Main topics and trends
   - What members care about
   - Discussions that drew the most engagement

3. **Sentiment**
   - Overall mood (positive / negative)
   - Relationships between members
   - Early signs of potential problems

4. **Recommendations**
   - Ways to raise engagement
   - Improvements to how the community is run
   - Things to keep an eye on

Keep the analysis concrete and constructive."""


@dataclass
class PromptValidation:
    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def validate_prompt(prompt: str) -> PromptValidation:
    """Check a custom analysis prompt before it is stored."""
    validation = PromptValidation()

    if len(prompt) < MIN_PROMPT_LENGTH:
        validation.errors.append(
            f"Prompt is too short (at least {MIN_PROMPT_LENGTH} characters required)"
        )
        validation.is_valid = False

    if len(prompt) > MAX_PROMPT_LENGTH:
        validation.warnings.append(
            f"Prompt may be too long (over {MAX_PROMPT_LENGTH} characters)"
        )

    lowered = prompt.lower()
    if not any(keyword in lowered for keyword in ANALYSIS_KEYWORDS):
        validation.warnings.append("Prompt may not clearly ask for an analysis")

    if any(pattern.search(prompt) for pattern in HARMFUL_PATTERNS):
        validation.errors.append("Prompt contains potentially harmful instructions")
        validation.is_valid = False

    return validation
