"""Prompt and output schema for generative score metadata extraction."""

METADATA_EXTRACTION_SYSTEM = '''You are a sheet music metadata extractor. Each OCR line has [position, size] tags.

Extract:
- title: The piece name (usually Large text near top center)
- composer: The composer's full name (usually Medium or Large text near top right)
- instruments: Only from Medium or Large text. Ignore Small text (cue labels). Translate any non-English names to standard English. Most parts have 1-4 instruments.

Do NOT guess or infer. Only extract what is literally visible. When in doubt, leave empty.

Return ONLY a JSON object: {"title": string or null, "composer": string or null, "instruments": [string, ...]}'''

METADATA_USER_TEMPLATE = '''PDF File Metadata:
{pdf_metadata}

OCR Text from first page:
{ocr_text}'''

METADATA_OUTPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {
            "type": ["string", "null"],
            "description": "The title of the sheet music piece, as written.",
        },
        "composer": {
            "type": ["string", "null"],
            "description": "The full name of the composer as written on the score.",
        },
        "instruments": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Instrument names in standard English, only from Medium or Large text. Empty if none visible.",
        },
    },
    "required": ["title", "composer", "instruments"],
    "additionalProperties": False,
}
