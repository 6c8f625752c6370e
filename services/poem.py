"""
Birthday poem generation from colleague descriptions.

generate_birthday_poem() always returns text: any failure of the OpenAI call
(error, timeout, empty output, missing credentials) yields FALLBACK_POEM.
"""

from config import FALLBACK_POEM, TEMPERATURE_SETTINGS, TOKEN_LIMITS, get_logger
from integrations.openai import complete

logger = get_logger("poem")


def build_poem_prompt(descriptions):
    """
    Build the single prompt sent to the model.

    Args:
        descriptions: Ordered description texts (str) or store rows with a "message" key
    """
    texts = [d["message"] if isinstance(d, dict) else d for d in descriptions]
    descriptions_text = "\n".join(texts)

    return (
        "Based on these descriptions of someone from their colleagues:\n\n"
        f"{descriptions_text}\n\n"
        "Write a warm, personal, and fun birthday poem that incorporates these qualities "
        "and characteristics. The poem should be short, light-hearted and celebratory. "
        "Just return the poem and no introduction or other text. Format it with line breaks."
    )


def generate_birthday_poem(descriptions):
    """
    Generate a short celebratory poem.

    Args:
        descriptions: Ordered description texts or store rows

    Returns:
        str: The poem, or FALLBACK_POEM on any failure
    """
    prompt = build_poem_prompt(descriptions)

    try:
        poem = complete(
            input_text=prompt,
            max_tokens=TOKEN_LIMITS["birthday_poem"],
            temperature=TEMPERATURE_SETTINGS["default"],
            context="BIRTHDAY_POEM",
        )
    except Exception as e:
        logger.error(f"POEM_ERROR: Error generating poem, using fallback: {e}")
        return FALLBACK_POEM

    poem = (poem or "").strip()
    if not poem:
        logger.warning("POEM_ERROR: Empty poem returned, using fallback")
        return FALLBACK_POEM

    logger.info(f"POEM: Generated poem from {len(descriptions)} description(s)")
    return poem
