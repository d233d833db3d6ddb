"""
Prompt Management Module

Loads LLM prompt templates from the .txt files in this directory so prompt
wording can change without touching code. Templates use str.format fields.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

# Get the prompts directory
PROMPTS_DIR = Path(__file__).parent


class PromptLoader:
    """Load and cache prompt templates from files"""

    def __init__(self, prompts_dir: Path = PROMPTS_DIR):
        self._prompts_dir = prompts_dir
        self._cache: dict[str, str] = {}

    def load_prompt(self, prompt_name: str) -> str:
        """
        Load a prompt template from file.

        Args:
            prompt_name: Name of the prompt file (without .txt extension)

        Returns:
            Prompt template string

        Raises:
            FileNotFoundError: If no template with that name exists
        """
        if prompt_name not in self._cache:
            prompt_path = self._prompts_dir / f"{prompt_name}.txt"

            if not prompt_path.exists():
                raise FileNotFoundError(f"Prompt file not found: {prompt_path}")

            self._cache[prompt_name] = prompt_path.read_text(encoding="utf-8").strip()

        return self._cache[prompt_name]

    def render(self, prompt_name: str, **fields: str) -> str:
        """Load a template and fill in its fields."""
        return self.load_prompt(prompt_name).format(**fields)


@lru_cache(maxsize=1)
def get_prompt_loader() -> PromptLoader:
    """Shared loader instance."""
    return PromptLoader()
