"""Aggregation of evidence texts into record content entries."""

from typing import Dict, Iterable, List

from .evidence import EvidenceItem


def aggregate(items: Iterable[EvidenceItem]) -> List[Dict[str, str]]:
    """
    Merge evidence items with identical text into ``{sources, text}`` entries.

    Texts are compared after right-trimming. A merged entry lists its sources
    joined by ", " in discovery order and keeps the first item's text as is.
    Entries are ordered by first discovery.
    """
    entries: Dict[str, Dict[str, object]] = {}
    for item in items:
        lookup = item.text.rstrip()
        if lookup in entries:
            if item.source not in entries[lookup]["sources"]:
                entries[lookup]["sources"].append(item.source)
        else:
            entries[lookup] = {"sources": [item.source], "text": item.text}

    return [
        {"sources": ", ".join(entry["sources"]), "text": entry["text"]}
        for entry in entries.values()
    ]
