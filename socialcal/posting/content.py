"""
Text helpers for turning composer rich text into what platforms accept.
"""
import re
from typing import List

_ENCODED_MARKUP = [
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&amp;", "&"),
    ("&quot;", '"'),
    ("&#39;", "'"),
]

_TYPOGRAPHIC_ENTITIES = [
    ("&nbsp;", " "),
    ("&ldquo;", '"'),
    ("&rdquo;", '"'),
    ("&lsquo;", "'"),
    ("&rsquo;", "'"),
    ("&mdash;", "—"),
    ("&ndash;", "–"),
]

_BLOCK_BREAKS = [
    (re.compile(r"</p>", re.IGNORECASE), "\n\n"),
    (re.compile(r"<br\s*/?>", re.IGNORECASE), "\n"),
    (re.compile(r"</div>", re.IGNORECASE), "\n"),
    (re.compile(r"</li>", re.IGNORECASE), "\n"),
]

_TAG = re.compile(r"<[^>]*>")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_INLINE_SPACE = re.compile(r"[^\S\n]+")


def clean_html_content(content) -> str:
    """Convert editor HTML into plain text with paragraph breaks preserved.

    Double-encoded markup (``&lt;p&gt;``) is decoded first so it is stripped
    like real tags.
    """
    if not content or not isinstance(content, str):
        return ""

    cleaned = content
    for entity, char in _ENCODED_MARKUP:
        cleaned = cleaned.replace(entity, char)

    for pattern, replacement in _BLOCK_BREAKS:
        cleaned = pattern.sub(replacement, cleaned)

    for entity, char in _TYPOGRAPHIC_ENTITIES:
        cleaned = cleaned.replace(entity, char)

    cleaned = _TAG.sub("", cleaned)
    cleaned = _EXCESS_NEWLINES.sub("\n\n", cleaned)
    cleaned = _INLINE_SPACE.sub(" ", cleaned)

    return "\n".join(line.strip() for line in cleaned.split("\n")).strip()


def number_thread_parts(parts: List[str], add_numbers: bool = True) -> List[str]:
    """Prefix each part with ``[i/n]`` when the thread has more than one part."""
    texts = [p for p in (clean_html_content(p) for p in parts) if p]
    if not add_numbers or len(texts) < 2:
        return texts
    total = len(texts)
    return [f"[{i}/{total}] {text}" for i, text in enumerate(texts, start=1)]
