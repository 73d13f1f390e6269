from __future__ import annotations

from typing import Iterable, List

from stockbridge.core.text import tokenize
from stockbridge.models.inventory import Product


def name_matches(name: str, tokens: List[str]) -> bool:
    # plain substring AND: "cup era" also hits "Recuperator"
    if not name:
        return False
    lowered = name.lower()
    return all(t in lowered for t in tokens)


def search(query: str, catalog: Iterable[Product]) -> List[Product]:
    """
    Products whose name contains every whitespace-separated token of `query`,
    in catalog order. A blank query matches nothing.
    """
    tokens = tokenize(query)
    if not tokens:
        return []
    return [p for p in catalog if name_matches(p.name, tokens)]
