# council/prompts.py
"""
PulseCraft — Prompt Catalogue

System prompts are module constants; user prompts are thin pure functions
of their inputs. Each fan-out engine reads exactly three prompt pairs from
here, one per provider role:

    structure → strict JSON, authoritative
    subtext   → emotional / archetypal free text
    analysis  → structural / keyword free text

Nothing in this module talks to a provider.
"""

import json
from typing import Any, Dict, List, Optional, Sequence

from core.models import REQUIRED_FIELDS, join_or_none


# -----------------------------------------------------------------------------
# Shared schema
# -----------------------------------------------------------------------------

VOICE_KIT_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "tone": {"type": "STRING"},
        "vocabulary": {"type": "STRING"},
        "phrasingStyle": {"type": "STRING"},
        "archetype": {"type": "STRING"},
        "samplePhrases": {"type": "ARRAY", "items": {"type": "STRING"}},
        "phrasesToAvoid": {"type": "ARRAY", "items": {"type": "STRING"}},
        "dnaTags": {"type": "ARRAY", "items": {"type": "STRING"}},
        "symbolAnchors": {"type": "ARRAY", "items": {"type": "STRING"}},
    },
    "required": list(REQUIRED_FIELDS),
}

_SCHEMA_TEXT = json.dumps(VOICE_KIT_SCHEMA, indent=2)

CLASSIFIER_INPUT_CHARS = 500


# -----------------------------------------------------------------------------
# Intent classification
# -----------------------------------------------------------------------------

INTENT_SYSTEM_PROMPT = """You are a strict routing system. Classify the user's request into ONE category:
1. NARRATIVE (Story, manifesto, essay, deep reflection, emotional writing)
2. STRUCTURED (Plan, strategy, analysis, technical doc, outline, how-to)
3. ACTION (Email, social post, ad copy, sales pitch, dialogue, short request)

If unclear, output ACTION.
Output ONLY the one word label."""

INTENT_FOCUS = {
    "NARRATIVE": "Focus: the text is narrative; weight rhythm, imagery and emotional arc.",
    "STRUCTURED": "Focus: the text is structured; weight organization, precision and terminology.",
    "ACTION": "Focus: the text is action-oriented; weight directness, hooks and calls to action.",
}


def intent_user_prompt(text: str) -> str:
    return text[:CLASSIFIER_INPUT_CHARS]


# -----------------------------------------------------------------------------
# Voice extraction
# -----------------------------------------------------------------------------

EXTRACTION_STRUCTURE_SYSTEM = (
    "You extract structure, schema-correct JSON, and explicit linguistic patterns. "
    f"Your output must be a JSON object strictly adhering to this schema: {_SCHEMA_TEXT}\n"
    "Ensure all array fields (samplePhrases, phrasesToAvoid, dnaTags, symbolAnchors) "
    "are valid JSON arrays. Do not include any other text or formatting outside the JSON object."
)

EXTRACTION_SUBTEXT_SYSTEM = (
    "You reveal deeper emotional tone, archetypal narrative, subtextual intention. "
    "Output concise plain text."
)

EXTRACTION_ANALYSIS_SYSTEM = (
    "You provide bullet-level linguistic analysis, tendencies, bias markers, and structure."
)

EXTRACTION_STRUCTURE_TEMPERATURE = 0.2
EXTRACTION_SUBTEXT_TEMPERATURE = 0.4


def extraction_user_prompt(text: str, intent: Optional[str] = None) -> str:
    """The brand text, prefixed with an intent focus line when one is known."""
    focus = INTENT_FOCUS.get(intent or "")
    if focus:
        return f"{focus}\n\n{text}"
    return text


# -----------------------------------------------------------------------------
# Alchemy
# -----------------------------------------------------------------------------

ALCHEMY_STRUCTURE_SYSTEM = (
    "You are a master synthesist. Output a JSON object strictly adhering to this "
    f"schema: {_SCHEMA_TEXT}.\n"
    "You MUST provide detailed, descriptive, and non-empty values for ALL required "
    "properties. Ensure all array fields are valid JSON arrays. Your response should "
    "start directly with '{'."
)

ALCHEMY_SUBTEXT_SYSTEM = "You are a concise namer."
ALCHEMY_ANALYSIS_SYSTEM = "You are a strict keyword extractor."

ALCHEMY_STRUCTURE_TEMPERATURE = 0.6
ALCHEMY_SUBTEXT_TEMPERATURE = 0.7

_ALCHEMY_PREAMBLE = """Your task is to perform a profound, non-linear synthesis of the provided Voice Kits. These are the distilled essence of unique voices. Identify the emergent properties, the unexpected harmonies, and the deeper, unifying frequency that arises when these voices are brought together.

Synthesize a NEW Voice Kit that could not have been predicted by merely analyzing its components.
All emergent qualities must be grounded in patterns actually present in the source Voice Kits. Do not invent traits with no lineage or connection to the input material. The synthesis may transcend the components, but it must remain traceable to them.

For EVERY property (Tone, Vocabulary, Phrasing Style, Archetype, Sample Phrases, Phrases To Avoid, DNA Tags, Symbol Anchors) provide a rich, detailed, and descriptive response. Do not leave any field blank, return generic placeholders, or provide empty arrays.

Focus on:
1. Emergent Tone: a concise, evocative description of the new overall emotional and communicative tone.
2. Transformed Vocabulary: the new key phrases, word types, and linguistic complexity.
3. Evolved Phrasing Style: the new sentence structure, rhythm, and rhetorical power.
4. Synthesized Archetype: the new dominant brand archetype (e.g., "The Skeptical Sage").
5. Interconnected DNA Tags: 3-5 new, very short (1-2 word) conceptual tags reflecting the fusion.
6. Resonant Symbol Anchors: 3-5 new, very short (1-3 word) metaphorical or thematic anchors.
7. Harmonized Sample Phrases: 2-3 new sample phrases that embody the synthesized voice.
8. Refined Phrases to Avoid: 2-3 words or stylistic elements to avoid.

The output must be a single JSON object, strictly adhering to the Voice Kit schema.

Here are the Voice Kits to be alchemized:"""


def _kit_block(index: int, kit: Dict[str, Any]) -> str:
    def listed(key: str) -> str:
        value = kit.get(key)
        return join_or_none(value) if isinstance(value, (list, tuple)) else "None"

    return "\n".join([
        f'--- Voice Kit {index} ("{kit.get("name") or "Untitled"}") ---',
        f"Tone: {kit.get('tone') or 'None'}",
        f"Vocabulary: {kit.get('vocabulary') or 'None'}",
        f"Phrasing Style: {kit.get('phrasingStyle') or 'None'}",
        f"Archetype: {kit.get('archetype') or 'None'}",
        f"Sample Phrases: {listed('samplePhrases')}",
        f"Phrases To Avoid: {listed('phrasesToAvoid')}",
        f"DNA Tags: {listed('dnaTags')}",
        f"Symbol Anchors: {listed('symbolAnchors')}",
    ])


def alchemy_structure_prompt(kits: Sequence[Dict[str, Any]]) -> str:
    """Full synthesis prompt listing every source kit field by field."""
    blocks = "\n\n".join(_kit_block(i + 1, kit) for i, kit in enumerate(kits))
    return f"{_ALCHEMY_PREAMBLE}\n\n{blocks}\n\nPerform the alchemy. Provide only the refined JSON object."


def alchemy_archetype_prompt(kits: Sequence[Dict[str, Any]]) -> str:
    return (
        "Review these Voice Kits.\n"
        "Resolve the tension between them into a NEW, singular Archetype.\n"
        'Output ONLY the name of this new Archetype (e.g., "The Quantum Sage").\n'
        'Do not write a full sentence. Do not write "The archetype is...". Just the name.\n\n'
        f"Data: {json.dumps(list(kits))}"
    )


def alchemy_bridge_prompt(kits: Sequence[Dict[str, Any]]) -> str:
    return (
        'Identify 3 unique "Bridge Words" that fuse these styles.\n'
        "Output ONLY the 3 words, separated by commas.\n"
        "NO intro text. NO explanations. NO bullet points.\n\n"
        f"Data: {json.dumps(list(kits))}"
    )


# -----------------------------------------------------------------------------
# Latent layer
# -----------------------------------------------------------------------------

LATENT_STRUCTURE_SYSTEM = """You are analyzing linguistic structure ONLY.

From the text below, infer:
1. Narrative structure (how ideas are sequenced and resolved).
2. Consistency of voice and structure across the passage.

Output STRICT JSON with:
{
  "narrativeMode": "",
  "stabilityIndex": number between 0.0 and 1.0
}

Rules:
- Do NOT infer emotions.
- Do NOT infer psychology.
- Base answers ONLY on structure, transitions, and consistency.
- StabilityIndex reflects internal coherence, not quality."""

LATENT_SUBTEXT_SYSTEM = """Analyze the emotional rhythm and internal tension of the language.

You are NOT diagnosing a person.
You are describing the cadence and unresolved polarity in the text itself.

Return PLAIN TEXT with two labeled lines only:

Emotional Cadence: <short phrase>
Cognitive Tension: <short phrase>

Rules:
- Do not speculate beyond the text.
- Use neutral, descriptive language.
- Focus on rhythm, contrast, modulation."""

LATENT_ANALYSIS_SYSTEM = """Analyze the language for:
1. Primary communicative intent.
2. Recurring conceptual or symbolic motifs.

Output STRICT JSON:

{
  "communicativeIntent": "",
  "dominantMotifs": []
}

Rules:
- Motifs must be recurring ideas or metaphors.
- Do NOT invent symbolism.
- Use short phrases only."""

LATENT_STRUCTURE_TEMPERATURE = 0.1
LATENT_SUBTEXT_TEMPERATURE = 0.3


# -----------------------------------------------------------------------------
# Content generation
# -----------------------------------------------------------------------------

CONTENT_SYSTEM_PROMPT = (
    "You are a master stylist and voice chameleon. Your task is to generate content "
    "that perfectly embodies a specific voice and style."
)

CONTENT_TEMPERATURE = 0.7


def content_prompt(kit: Dict[str, Any], style: str, context: str) -> str:
    """Generation prompt carrying all eight kit characteristics and the context."""
    def listed(key: str) -> str:
        value = kit.get(key)
        if isinstance(value, (list, tuple)):
            return join_or_none(value)
        return value or "None"

    lines: List[str] = [
        f'Generate content in the style of a "{style}" piece, using the following voice characteristics:',
        "",
        f"Tone: {kit.get('tone', '')}",
        f"Vocabulary: {kit.get('vocabulary', '')}",
        f"Archetype: {kit.get('archetype', '')}",
        f"Phrasing Style: {kit.get('phrasingStyle', '')}",
        f"Sample Phrases: {listed('samplePhrases')}",
        f"Phrases to Avoid: {listed('phrasesToAvoid')}",
        f"DNA Tags: {listed('dnaTags')}",
        f"Symbol Anchors: {listed('symbolAnchors')}",
        "",
        "Here is the core idea or context for the content:",
        f'"{context}"',
        "",
        "Ensure the output is a coherent, well-written piece of content, reflecting ONLY "
        "these characteristics. Do NOT add any preamble or postamble.",
    ]
    return "\n".join(lines)


__all__ = [
    "VOICE_KIT_SCHEMA",
    "INTENT_SYSTEM_PROMPT",
    "INTENT_FOCUS",
    "intent_user_prompt",
    "EXTRACTION_STRUCTURE_SYSTEM",
    "EXTRACTION_SUBTEXT_SYSTEM",
    "EXTRACTION_ANALYSIS_SYSTEM",
    "extraction_user_prompt",
    "ALCHEMY_STRUCTURE_SYSTEM",
    "ALCHEMY_SUBTEXT_SYSTEM",
    "ALCHEMY_ANALYSIS_SYSTEM",
    "alchemy_structure_prompt",
    "alchemy_archetype_prompt",
    "alchemy_bridge_prompt",
    "LATENT_STRUCTURE_SYSTEM",
    "LATENT_SUBTEXT_SYSTEM",
    "LATENT_ANALYSIS_SYSTEM",
    "CONTENT_SYSTEM_PROMPT",
    "CONTENT_TEMPERATURE",
    "content_prompt",
]
