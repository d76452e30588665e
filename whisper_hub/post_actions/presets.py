# whisper_hub/post_actions/presets.py
"""
Built-in action catalogue.

Holds the remote model allow-list and the predefined actions offered to every
user. Prompts are versioned module constants; change only with intent.
"""

from __future__ import annotations

from typing import List, Optional

from whisper_hub.post_actions.schema import RemoteCompletionAction


AVAILABLE_MODELS: tuple[str, ...] = (
    "gpt-3.5-turbo",
    "gpt-3.5-turbo-16k",
    "gpt-4",
    "gpt-4-turbo-preview",
    "gpt-4-turbo",
    "gpt-4o",
    "gpt-4o-mini",
)


MEETING_SUMMARY_PROMPT = """
Analyze this meeting transcript and create a comprehensive summary with the following sections:

1. **Key Decisions Made**
2. **Action Items** (with responsible parties if mentioned)
3. **Important Discussion Points**
4. **Next Steps**

Format the output with clear headings and bullet points for easy reading.
""".strip()

ACTION_ITEMS_PROMPT = """
Extract all action items, tasks, deadlines, and assignments from this transcript. For each item, identify:

- The specific task or action required
- Who is responsible (if mentioned)
- Any deadlines or timeframes mentioned
- Priority level (if indicated)

Format as a prioritized task list with checkboxes.
""".strip()

EXECUTIVE_BRIEF_PROMPT = """
Create a concise executive summary of this transcript suitable for leadership review. Focus on:

- Strategic decisions and their business impact
- Financial implications or budget discussions
- Risk factors or opportunities identified
- Key performance metrics or outcomes
- Critical next steps requiring leadership attention

Keep it under 300 words and use business-appropriate language.
""".strip()

KEY_INSIGHTS_PROMPT = """
Identify and extract the most important insights, conclusions, and strategic points from this transcript. Focus on:

- Novel ideas or innovative solutions discussed
- Important data points or metrics mentioned
- Strategic implications for the business
- Risk factors or challenges identified
- Opportunities for improvement or growth

Present as numbered insights with brief explanations.
""".strip()

QA_FORMAT_PROMPT = """
Convert this transcript into a comprehensive Q&A format that captures all important questions asked and answers provided. Include:

- All direct questions and their answers
- Implied questions from the discussion
- Key topics addressed even if not explicitly asked

Format with clear Q: and A: markers for easy reading.
""".strip()


PREDEFINED_ACTIONS: tuple[RemoteCompletionAction, ...] = (
    RemoteCompletionAction(
        id="openai-meeting-summary",
        name="Smart Meeting Summary",
        description="AI-powered comprehensive meeting summary with key decisions and action items",
        prompt=MEETING_SUMMARY_PROMPT,
        model="gpt-3.5-turbo",
        temperature=0.3,
        max_tokens=1500,
    ),
    RemoteCompletionAction(
        id="openai-action-items",
        name="Action Items Extractor",
        description="Extract and organize all action items, tasks, and assignments",
        prompt=ACTION_ITEMS_PROMPT,
        model="gpt-3.5-turbo",
        temperature=0.2,
        max_tokens=1000,
    ),
    RemoteCompletionAction(
        id="openai-executive-brief",
        name="Executive Brief",
        description="Concise executive summary for leadership review",
        prompt=EXECUTIVE_BRIEF_PROMPT,
        model="gpt-4",
        temperature=0.2,
        max_tokens=800,
    ),
    RemoteCompletionAction(
        id="openai-key-insights",
        name="Key Insights",
        description="Identify important insights, conclusions, and strategic points",
        prompt=KEY_INSIGHTS_PROMPT,
        model="gpt-3.5-turbo",
        temperature=0.4,
        max_tokens=1200,
    ),
    RemoteCompletionAction(
        id="openai-qa-format",
        name="Q&A Generator",
        description="Convert transcript into structured question and answer format",
        prompt=QA_FORMAT_PROMPT,
        model="gpt-3.5-turbo",
        temperature=0.3,
        max_tokens=2000,
    ),
)


def predefined_actions() -> List[RemoteCompletionAction]:
    return list(PREDEFINED_ACTIONS)


def find_predefined_action(action_id: str) -> Optional[RemoteCompletionAction]:
    for action in PREDEFINED_ACTIONS:
        if action.id == action_id:
            return action
    return None
