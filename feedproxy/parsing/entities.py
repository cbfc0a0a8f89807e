"""Character reference decoding for feed and article text."""

import re

_DECIMAL_RE = re.compile(r'&#(\d+);')
_HEX_RE = re.compile(r'&#x([0-9a-fA-F]+);')
_SURROGATE_PAIR_RE = re.compile(r'([\ud800-\udbff])([\udc00-\udfff])')
_LONE_SURROGATE_RE = re.compile(r'[\ud800-\udfff]')

# Applied in this order, each exactly once
NAMED_ENTITIES = (
    ('&lt;', '<'),
    ('&gt;', '>'),
    ('&amp;', '&'),
    ('&quot;', '"'),
    ('&#39;', "'"),
    ('&apos;', "'"),
    ('&nbsp;', ' '),
    ('&mdash;', '—'),
    ('&ndash;', '–'),
    ('&lsquo;', '‘'),
    ('&rsquo;', '’'),
    ('&ldquo;', '“'),
    ('&rdquo;', '”'),
    ('&hellip;', '…'),
)


def _codepoint(match: re.Match, base: int) -> str:
    try:
        return chr(int(match.group(1), base))
    except (ValueError, OverflowError):
        return match.group(0)


def _join_surrogates(match: re.Match) -> str:
    high, low = ord(match.group(1)), ord(match.group(2))
    return chr(0x10000 + ((high - 0xD800) << 10) + (low - 0xDC00))


def decode_entities(text: str) -> str:
    """Decode numeric character references, then the known named entities.

    Single pass: ``&amp;amp;`` becomes ``&amp;``, not ``&``. Unknown named
    entities and out-of-range code points are left as they are. Surrogate
    pairs are combined and unpaired surrogates become U+FFFD.
    """
    if not text:
        return text or ""

    text = _DECIMAL_RE.sub(lambda m: _codepoint(m, 10), text)
    text = _HEX_RE.sub(lambda m: _codepoint(m, 16), text)
    # Unpaired surrogates cannot be encoded as UTF-8
    text = _SURROGATE_PAIR_RE.sub(_join_surrogates, text)
    text = _LONE_SURROGATE_RE.sub('\ufffd', text)

    for entity, literal in NAMED_ENTITIES:
        text = text.replace(entity, literal)
    return text
