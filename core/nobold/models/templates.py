"""
Chat template detection for downloaded models.
Infers the prompt format from the repository name.
"""

from nobold.config import DEFAULT_CHAT_TEMPLATE

# Known patterns: repository name keyword -> chat template tag.
# Longer keywords are checked first so "llama-3" wins over "llama".
PATTERNS: dict[str, str] = {
    "llama-3": "llama3",
    "llama3": "llama3",
    "llama-2": "llama2",
    "llama2": "llama2",
    "codellama": "llama2",
    "tinyllama": "zephyr",
    "mistral": "mistral",
    "mixtral": "mistral",
    "zephyr": "zephyr",
    "qwen": "chatml",
    "hermes": "chatml",
    "openhermes": "chatml",
    "dolphin": "chatml",
    "yi-": "chatml",
    "phi-3": "phi3",
    "phi3": "phi3",
    "gemma": "gemma",
    "deepseek": "deepseek",
    "vicuna": "vicuna",
    "alpaca": "alpaca",
    "command-r": "command-r",
}


def detect_chat_template(repo_id: str) -> str:
    """
    Guess the chat template tag for a repository.

    Args:
        repo_id: Repository id (e.g., "TheBloke/Mistral-7B-Instruct-v0.2-GGUF")

    Returns:
        The template tag, or "auto" when nothing matches
    """
    name = repo_id.split("/")[-1].lower()

    for keyword in sorted(PATTERNS, key=len, reverse=True):
        if keyword in name:
            return PATTERNS[keyword]

    return DEFAULT_CHAT_TEMPLATE
