"""AI answer judge backed by an OpenAI-compatible chat route."""
from .judge import JUDGE_TARGET, SYSTEM_PROMPT, bind_llm_judge, build_prompt, make_llm_judge

__all__ = ["JUDGE_TARGET", "SYSTEM_PROMPT", "bind_llm_judge", "build_prompt", "make_llm_judge"]
