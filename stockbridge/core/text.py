from typing import List, Optional


def tokenize(text: Optional[str]) -> List[str]:
    # whitespace split, lower-cased, empties dropped
    return [t for t in (text or "").lower().split() if t]
