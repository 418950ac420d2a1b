"""
TimeRelay Backend — Notion Property Codec
===========================================

What:  Reads typed values out of Notion pages and builds property values and
       filter clauses for writes and queries.
How:   Pure functions over the JSON shapes of the Notion API. Readers are
       tolerant: a missing property or an empty list yields None.
Who:   Used by TrackingService and ReportService; the record store itself
       stays agnostic of property types.

Page shape (abridged):
    {
        "id": "…",
        "properties": {
            "Nome":    {"type": "title", "title": [{"plain_text": "Acme"}]},
            "Cliente": {"type": "relation", "relation": [{"id": "…"}]},
            "Duração": {"type": "number", "number": 1.5},
            "Data":    {"type": "date", "date": {"start": "2024-01-15T12:00:00Z"}},
        },
    }
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

Page = Dict[str, Any]


# ══════════════════════════════════════════════════════════════════════════
# Readers
# ══════════════════════════════════════════════════════════════════════════

def _property(page: Page, name: str) -> Dict[str, Any]:
    return (page.get("properties") or {}).get(name) or {}


def title_text(page: Page, name: str) -> Optional[str]:
    """
    Returns the plain text of the first fragment of a title property.

    None when the property is absent or the title is empty.
    """
    fragments = _property(page, name).get("title") or []
    if not fragments:
        return None
    return fragments[0].get("plain_text") or None


def relation_ids(page: Page, name: str) -> List[str]:
    """Returns the ids referenced by a relation property, in order."""
    return [ref["id"] for ref in _property(page, name).get("relation") or [] if "id" in ref]


def first_relation_id(page: Page, name: str) -> Optional[str]:
    ids = relation_ids(page, name)
    return ids[0] if ids else None


def number_value(page: Page, name: str) -> Optional[float]:
    value = _property(page, name).get("number")
    return float(value) if value is not None else None


def date_start(page: Page, name: str) -> Optional[datetime]:
    """Parses the start of a date property (ISO 8601), or None."""
    date = _property(page, name).get("date") or {}
    start = date.get("start")
    if not start:
        return None
    # Python < 3.11 does not accept the trailing "Z"
    return datetime.fromisoformat(start.replace("Z", "+00:00"))


# ══════════════════════════════════════════════════════════════════════════
# Property value builders (page creation)
# ══════════════════════════════════════════════════════════════════════════

def title_property(text: str) -> Dict[str, Any]:
    return {"title": [{"text": {"content": text}}]}


def relation_property(*ids: str) -> Dict[str, Any]:
    return {"relation": [{"id": record_id} for record_id in ids]}


def number_property(value: float) -> Dict[str, Any]:
    return {"number": value}


def date_property(start: datetime) -> Dict[str, Any]:
    return {"date": {"start": start.isoformat()}}


# ══════════════════════════════════════════════════════════════════════════
# Filter and sort builders (queries)
# ══════════════════════════════════════════════════════════════════════════

def relation_contains(name: str, record_id: str) -> Dict[str, Any]:
    return {"property": name, "relation": {"contains": record_id}}


def date_on_or_after(name: str, moment: datetime) -> Dict[str, Any]:
    return {"property": name, "date": {"on_or_after": moment.isoformat()}}


def date_on_or_before(name: str, moment: datetime) -> Dict[str, Any]:
    return {"property": name, "date": {"on_or_before": moment.isoformat()}}


def all_of(*clauses: Dict[str, Any]) -> Dict[str, Any]:
    return {"and": list(clauses)}


def any_of(*clauses: Dict[str, Any]) -> Dict[str, Any]:
    return {"or": list(clauses)}


def ascending(name: str) -> Dict[str, Any]:
    return {"property": name, "direction": "ascending"}
