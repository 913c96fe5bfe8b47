"""Prompt templates for the research oracle and excerpt judge.

Modules:
    validation_prompts: Date verdict, narrative rewrite and excerpt prompts
"""

from dateline.config.prompts.validation_prompts import (
    ARTICLE_EXCERPT_PROMPT,
    ARTICLE_JUDGE_SYSTEM_PROMPT,
    DATE_VERDICT_PROMPT,
    NARRATIVE_REWRITE_PROMPT,
    ORACLE_SYSTEM_PROMPT,
    SOURCE_EXCERPT_PROMPT,
    SOURCE_JUDGE_SYSTEM_PROMPT,
)

__all__ = [
    "ARTICLE_EXCERPT_PROMPT",
    "ARTICLE_JUDGE_SYSTEM_PROMPT",
    "DATE_VERDICT_PROMPT",
    "NARRATIVE_REWRITE_PROMPT",
    "ORACLE_SYSTEM_PROMPT",
    "SOURCE_EXCERPT_PROMPT",
    "SOURCE_JUDGE_SYSTEM_PROMPT",
]
