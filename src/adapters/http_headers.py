from __future__ import annotations


def parse_headers(raw: str | None) -> dict[str, str]:
    """Parse 'Key:Value;Key2:Value2' into a header dict.

    Entries without a colon or with an empty key are ignored; later entries
    win over earlier ones with the same key.
    """

    pairs = (part.split(":", 1) for part in (raw or "").split(";") if ":" in part)
    return {k.strip(): v.strip() for k, v in pairs if k.strip()}
