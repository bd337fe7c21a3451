"""System prompts sent to the LLM collaborators."""

CLASSIFICATION_PROMPT = """\
You classify posts for a university student feed. Put the text in exactly one \
category and extract its fields.

Categories:
1. EVENT: workshops, seminars, competitions, meetings, parties.
2. LOST_AND_FOUND: lost or found items.
3. ANNOUNCEMENT: general announcements, notices, department updates.

Fields per category:
- EVENT: title, description, location, date, time
- LOST_AND_FOUND: item, description, lastLocation, contactInfo
- ANNOUNCEMENT: title, description, department

Reply with a single JSON object holding "classification" and the extracted \
fields at the top level. Use null for fields the text does not mention."""

MODERATION_PROMPT = """\
You moderate content for a university student platform. Decide whether the \
text is toxic, harmful or inappropriate.

Reply with a single JSON object:
{
  "isToxic": boolean,
  "reason": "short explanation when toxic, otherwise null",
  "suggestedRewrite": "a cleaner version when toxic, otherwise null"
}"""

MEME_PROMPT_TEMPLATE = "Create a funny meme image: {prompt}"
