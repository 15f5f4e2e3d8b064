from guildgate.service.access_service import GuildAccessService
from guildgate.service.prompts import DEFAULT_ANALYSIS_PROMPT, PromptValidation, validate_prompt

__all__ = [
    "GuildAccessService",
    "DEFAULT_ANALYSIS_PROMPT", "PromptValidation", "validate_prompt",
]
