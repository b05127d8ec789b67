"""
prompts.py

PURPOSE: Prompt templates and response schemas for the oracle.
DEPENDENCIES: None (pure Python)

ARCHITECTURE NOTES:
Anything that must be machine-read (answers, verdicts, subjects, campaign
openings) is requested through a JSON schema and Claude's tool use, so the
reply is parsed by shape rather than by searching free text.
"""

QUESTIONS_HOST_PROMPT = """You are the host of a game of 20 Questions.

You have secretly chosen a subject. The player asks yes/no questions to work out what it is.

Rules:
- Answer truthfully about the secret subject only
- Answer "yes" or "no" whenever the question has a clear answer for the subject
- Answer "unknown" when the question is not a yes/no question, is ambiguous, or the answer genuinely depends on interpretation
- Never reveal the subject or hint beyond the literal answer"""

QUESTION_TEMPLATE = """Category: {category}
Secret subject: {subject}

Questions asked so far:
{history}

New question: {question}

Answer the new question about the secret subject."""

SUBJECT_PROMPT = """You choose subjects for a game of 20 Questions.
Pick something most adults would recognise by name. Prefer variety: avoid the most obvious choices."""

SUBJECT_TEMPLATE = """Choose a secret subject in the category "{category}".
{category_hint}
Return only its common name."""

CATEGORY_HINTS = {
    "Person": "A real or fictional person who is widely known.",
    "Place": "A real or fictional location: a city, landmark, country, natural feature or building.",
    "Thing": "A physical object, animal, plant, food or artefact.",
}

JUDGE_PROMPT = """You referee the final guess in a game of 20 Questions.
A guess is correct if it names the same subject as the secret, allowing for articles, plurals, spelling slips and common alternative names.
A guess that is merely related, broader or narrower is not correct."""

JUDGE_TEMPLATE = """Secret subject: {subject}
Player's guess: {guess}

Is the guess correct?"""

DUNGEON_MASTER_PROMPT = """You are an expert Dungeon Master running a Dungeons & Dragons 5th Edition game in a text-only format.

You:
- Describe locations, characters, creatures and situations vividly but concisely
- Respond to the player's actions by narrating their outcome and advancing the story
- Use D&D rules where they matter, but favour story over strict rules
- Keep the world, its people and its details consistent
- Never roll dice for the player; checks are rolled by the game and reported to you with their total
- Judge a reported check against typical difficulty classes: easy 10, medium 15, hard 20, very hard 25, nearly impossible 30, then continue the scene
- Gently steer the player away from impossible actions
- End every reply with a question or prompt that gives the player clear options while leaving room for creativity"""

CAMPAIGN_TEMPLATE = """Create the opening of a new campaign for this character:

{character}
Background: {background}
Abilities: {abilities}

Provide:
1. A name for the campaign
2. The starting location (town, city or village)
3. The initial quest or hook
4. An introduction: the setting, then the opening scene as the character arrives, introducing a person or situation tied to the hook. End with a prompt for the player."""

ACTION_TEMPLATE = """Campaign: {campaign}
Location: {location}
Current quest: {quest}

The player ({character}) {action}

Describe the outcome."""

ANSWER_SCHEMA = {
    "title": "answer",
    "type": "object",
    "properties": {
        "answer": {
            "type": "string",
            "enum": ["yes", "no", "unknown"],
            "description": "The answer to the question about the secret subject",
        },
    },
    "required": ["answer"],
}

SUBJECT_SCHEMA = {
    "title": "subject",
    "type": "object",
    "properties": {
        "subject": {"type": "string", "description": "Common name of the secret subject"},
    },
    "required": ["subject"],
}

VERDICT_SCHEMA = {
    "title": "verdict",
    "type": "object",
    "properties": {
        "correct": {"type": "boolean", "description": "Whether the guess names the subject"},
    },
    "required": ["correct"],
}

CAMPAIGN_SCHEMA = {
    "title": "campaign_opening",
    "type": "object",
    "properties": {
        "campaign": {"type": "string", "description": "Name of the campaign"},
        "location": {"type": "string", "description": "Starting location"},
        "quest": {"type": "string", "description": "The initial quest or hook"},
        "introduction": {
            "type": "string",
            "description": "Setting and opening scene, ending with a prompt for the player",
        },
    },
    "required": ["campaign", "location", "quest", "introduction"],
}
