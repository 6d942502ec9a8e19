from .prompt import build_basic_prompt, build_diagnostic_prompt, build_search_prompt

__all__ = ["build_basic_prompt", "build_diagnostic_prompt", "build_search_prompt"]
