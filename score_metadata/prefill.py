"""Pre-fill values for the metadata confirmation form.

The pipeline only proposes; the import flow shows these values in an
editable form and persists nothing until the user confirms.

Merge rule:
- On import, a freshly extracted value wins over the record's value and
  the title falls back to the file name stem.
- When editing an existing record, its non-empty values win.
"""

from dataclasses import asdict, dataclass
from pathlib import PurePath
from typing import Dict, Optional

from .contracts import ExtractedMetadata
from .extractors.evidence_merger import first_present


@dataclass
class ScoreFields:
    """Editable metadata fields of a score record (None = unset)."""
    title: Optional[str] = None
    composer: Optional[str] = None
    instrument: Optional[str] = None
    key: Optional[str] = None
    time_signature: Optional[str] = None


@dataclass
class FormValues:
    """Text shown in the confirmation form; empty string = blank field."""
    title: str = ""
    composer: str = ""
    instrument: str = ""
    key: str = ""
    time_signature: str = ""

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def _file_stem(filename: Optional[str]) -> Optional[str]:
    if not filename:
        return None
    return PurePath(filename).stem


def prefill_form(
    extracted: ExtractedMetadata,
    existing: Optional[ScoreFields] = None,
    filename: Optional[str] = None,
    editing: bool = False,
) -> FormValues:
    """
    Merge extracted metadata with an existing record for display.

    Args:
        extracted: Pipeline output
        existing: Current record values, if any
        filename: Imported file name, used as the last-resort title
        editing: True when re-running extraction on an existing record

    Returns:
        FormValues with every field a (possibly empty) string
    """
    existing = existing or ScoreFields()
    proposed = ScoreFields(
        title=extracted.title,
        composer=extracted.composer,
        instrument=", ".join(extracted.instruments) or None,
        key=extracted.key,
        time_signature=extracted.time_signature,
    )
    first, second = (existing, proposed) if editing else (proposed, existing)

    return FormValues(
        title=first_present(first.title, second.title, _file_stem(filename)) or "",
        composer=first_present(first.composer, second.composer) or "",
        instrument=first_present(first.instrument, second.instrument) or "",
        key=first_present(first.key, second.key) or "",
        time_signature=first_present(first.time_signature, second.time_signature) or "",
    )
