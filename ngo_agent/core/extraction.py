"""Best-effort structured-data extraction from free-text model replies.

Extraction rule:
    Take the greedy substring from the first `{` to the last `}` and JSON-parse
    it. A parsed object becomes `Structured`; anything else (no braces, invalid
    JSON, empty text) becomes `Raw` with the untouched reply.

Known limitation:
    Stray braces in prose outside the intended JSON widen the match and make the
    parse fail, degrading to `Raw`. Braces inside JSON string literals are
    covered by the greedy span and parse normally.

Failure handling:
    Never raises. Degradation to `Raw` is a normal outcome that callers detect by
    type (or by the `raw` key of `to_dict()`).
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any


_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


@dataclass(frozen=True)
class Structured:
    """Reply parsed into a JSON object."""

    data: dict = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def to_dict(self) -> dict:
        return self.data


@dataclass(frozen=True)
class Raw:
    """Reply that could not be parsed; carries the original text verbatim."""

    text: str = ""

    def get(self, key: str, default: Any = None) -> Any:
        return self.text if key == "raw" else default

    def to_dict(self) -> dict:
        return {"raw": self.text}


def extract_json(text: str | None) -> Structured | Raw:
    """Parse the first-`{`-to-last-`}` span of `text`, degrading to `Raw`.

    Args:
        text: Raw model reply.

    Returns:
        `Structured` on a successful object parse, else `Raw(text)`.

    Edge cases:
        - `None` or empty text -> `Raw("")`.
        - Nested objects parse normally since the match is greedy.
        - Text like `"a {b} c {d}"` matches `{b} c {d}` and degrades to `Raw`.
    """
    content = text or ""
    match = _JSON_OBJECT.search(content)
    if match is None:
        return Raw(content)

    try:
        parsed = json.loads(match.group(0))
    except ValueError:
        return Raw(content)

    if not isinstance(parsed, dict):
        return Raw(content)
    return Structured(parsed)
