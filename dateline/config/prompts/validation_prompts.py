"""Prompt templates for the research oracle and the cheap excerpt judge.

Oracle prompts demand line-oriented ``LABEL: value`` output which
ResearchOracleClient decodes with a conservative fallback table.
Excerpt prompts demand a single YES / NO / UNCLEAR word.
"""

ORACLE_SYSTEM_PROMPT = (
    "You are an expert science historian and researcher. Focus on groundbreaking "
    "scientific discoveries, research milestones, and technological achievements "
    "from ALL regions and institutions worldwide. Provide accurate information "
    "with Wikidata QIDs and reliable peer-reviewed sources."
)

DATE_VERDICT_PROMPT = '''Did this scientific event happen on the specified date?

EVENT: {title}
CLAIMED DATE: {month_name} {day}, {year}
CONTEXT: {context}

Research this event and verify if the date is correct.

Answer in this exact format:
VERDICT: YES / NO / UNCLEAR
CONFIDENCE: HIGH / MEDIUM / LOW
ACTUAL_DATE: [if different, provide the correct date in format "Month DD, YYYY"]
REASON: [1-2 sentence explanation with sources]

Be strict: Only answer YES if you can confirm the exact date with reliable sources.'''

NARRATIVE_REWRITE_PROMPT = '''Rewrite this event description with the correct year.

EVENT: {title}
INCORRECT YEAR: {old_year}
CORRECT YEAR: {new_year}
ORIGINAL CONTEXT: {context}
REASON FOR CORRECTION: {reason}

Rewrite the context to reflect the correct year ({new_year}), keeping the same style and length (80-100 words). Use precise scientific language.

Return only the rewritten context:'''

ARTICLE_JUDGE_SYSTEM_PROMPT = (
    "You are a fact-checker verifying historical dates from Wikipedia articles."
)

ARTICLE_EXCERPT_PROMPT = '''Does this Wikipedia article confirm that {name} {action} on {month_name} {day}?

ARTICLE EXCERPT:
{excerpt}

Answer with ONE word only:
- YES: The article clearly confirms the date
- NO: The article contradicts or doesn't mention this date
- UNCLEAR: Cannot determine from this excerpt

Answer:'''

SOURCE_JUDGE_SYSTEM_PROMPT = (
    "You are a fact-checker verifying historical dates from sources."
)

SOURCE_EXCERPT_PROMPT = '''Does this source text confirm that "{title}" happened on {month_name} {day}?

SOURCE TEXT:
{excerpt}

Answer with ONE word only:
- YES: The source clearly confirms the event on this date
- NO: The source contradicts or doesn't mention this date
- UNCLEAR: Cannot determine from this excerpt

Answer:'''
