# pejelagarto_tables.py
# Pejelagarto - static tables: substitution maps, vowel wheels, invisible timestamp alphabets
#
# All tables are module constants. validate_tables() runs once at import and
# raises TableError on the first broken invariant, so a bad edit aborts start-up
# instead of producing text that cannot be decoded.

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


class TableError(RuntimeError):
    """A static table breaks a codec invariant."""


# ============================================================
# Reserved code points (never allowed inside a table)
# ============================================================

INTERNAL_ESCAPE = "\\"       # transient, removed before a stage returns
OUTPUT_ESCAPE = "\u00AD"     # soft hyphen, persists in Pejelagarto text
QUOTE = "'"                  # prefix of a multi code point replacement
MARKER_OPEN = "\uFFF0"
MARKER_CLOSE = "\uFFF1"
BYTE_MARKER = "\u3164"       # hangul filler, precedes an escaped invalid byte
BYTE_BASE = 0xE000           # invalid byte b travels as chr(BYTE_BASE + b)

RESERVED = frozenset(
    [INTERNAL_ESCAPE, OUTPUT_ESCAPE, QUOTE, MARKER_OPEN, MARKER_CLOSE, BYTE_MARKER]
    + [chr(BYTE_BASE + b) for b in range(256)]
)


# ============================================================
# Case helpers (Unicode aware, locale independent, 1:1 only)
# ============================================================

def to_upper(ch: str) -> str:
    """Uppercase of a single code point; ch itself when the mapping is not 1:1 (e.g. 'ß')."""
    up = ch.upper()
    return up if len(up) == 1 else ch


def to_lower(ch: str) -> str:
    """Lowercase of a single code point; ch itself when the mapping is not 1:1 (e.g. 'İ')."""
    low = ch.lower()
    return low if len(low) == 1 else ch


def case_stable(ch: str) -> bool:
    # upper(lower(c)) == upper(c) rejects look-alikes such as the Kelvin sign
    return not ch.isalpha() or to_upper(to_lower(ch)) == to_upper(ch)


def has_reversible_case(ch: str) -> bool:
    """One direction must round-trip: lower(upper(c)) == c for a lowercase c, upper(lower(c)) == c for an uppercase c."""
    return to_lower(to_upper(ch)) == ch or to_upper(to_lower(ch)) == ch


# ============================================================
# Substitution maps
# ============================================================

# Single letters. Strict involution (a->u, u->a), y maps onto itself.
LETTER_MAP: Dict[str, str] = {
    "a": "u",
    "b": "p",
    "d": "f",
    "e": "w",
    "f": "d",
    "g": "l",
    "i": "o",
    "k": "r",
    "l": "g",
    "m": "n",
    "n": "m",
    "o": "i",
    "p": "b",
    "q": "v",
    "r": "k",
    "u": "a",
    "v": "q",
    "w": "e",
    "y": "y",
}

# Short words and digraphs. Key and value have equal length; the coded form
# of every value here carries a leading QUOTE.
WORD_MAP: Dict[str, str] = {
    "hello": "araka",
    "hola": "arek",
    "fran": "filo",
    "the": "ele",
    "el": "le",
    "la": "al",
    "leg": "ady",
    "ch": "jc",
    "sh": "xs",
    "th": "zt",
}

# Keys and values come from disjoint code point sets; lengths may differ.
PUNCTUATION_MAP: Dict[str, str] = {
    "?": "‽",   # interrobang
    "!": "¡",
    ".": "..",
    ",": "\u060C",   # arabic comma
    ";": "\u204F",
    ":": "\uFE30",
    '"': "〞",
    "-": "\u2010",   # hyphen
    "(": "⦅",
    ")": "⦆",
}


# ============================================================
# Vowel wheels
# ============================================================

# base first, then single code point accented forms
ONE_RUNE_WHEEL: Dict[str, Tuple[str, ...]] = {
    "a": ("a", "à", "á", "â", "ã", "å", "ä", "ā", "ă"),
    "e": ("e", "è", "é", "ê", "ẽ", "ė", "ë", "ē", "ĕ"),
    "i": ("i", "ì", "í", "î", "ĩ", "ï", "ī", "ĭ"),
    "o": ("o", "ò", "ó", "ô", "õ", "ø", "ö", "ō", "ŏ"),
    "u": ("u", "ù", "ú", "û", "ũ", "ů", "ü", "ū", "ŭ"),
    "w": ("w", "ẁ", "ẃ", "ŵ", "ẅ"),
    "y": ("y", "ỳ", "ý", "ŷ", "ỹ", "ẏ", "ÿ", "ȳ"),
}

# base + combining ogonek (U+0328), caron (U+030C) or horn (U+031B)
TWO_RUNE_WHEEL: Dict[str, Tuple[str, ...]] = {
    "a": ("a\u0328", "a\u030C"),
    "e": ("e\u0328", "e\u030C"),
    "i": ("i\u0328", "i\u030C"),
    "o": ("o\u0328", "o\u030C", "o\u031B"),
    "u": ("u\u0328", "u\u030C", "u\u031B"),
    "w": ("w\u0328", "w\u030C"),
    "y": ("y\u0328",),
}


# ============================================================
# Invisible timestamp alphabets
# ============================================================

YEAR_BASE = 2025


def build_alphabet(from_cp: int, to_cp: int) -> Tuple[str, ...]:
    return tuple(chr(cp) for cp in range(from_cp, to_cp + 1))


def _chars(*cps: int) -> Tuple[str, ...]:
    return tuple(chr(cp) for cp in cps)


# index i encodes day i+1
DAY_ALPHABET = (
    _chars(0x2300, 0x2301, 0x24FC)
    + build_alphabet(0x2303, 0x2319)
    + _chars(0x24EA, 0x24EB, 0x231C, 0x231D, 0x231E)
)

# index i encodes month i+1
MONTH_ALPHABET = (
    build_alphabet(0x233C, 0x2340)
    + build_alphabet(0xA4F8, 0xA4FC)
    + _chars(0x2B4E, 0x2B4F)
)

# index i encodes year YEAR_BASE + i
YEAR_ALPHABET = (
    build_alphabet(0xFE70, 0xFE7E)
    + build_alphabet(0xFC5E, 0xFC63)
    + build_alphabet(0xFBB2, 0xFBD2)
    + build_alphabet(0xA674, 0xA67F)
    + build_alphabet(0x3192, 0x319F)
    + build_alphabet(0x2E2F, 0x2E35)
    + _chars(0x2E44, 0x2E49, 0x2E4E)
    + build_alphabet(0x23A2, 0x23A9)
    + _chars(0x2DE0, 0x23A0)
)

HOUR_ALPHABET = build_alphabet(0x23AA, 0x23BE) + _chars(0x0F0B, 0x23C0, 0x02B9)

MINUTE_ALPHABET = (
    build_alphabet(0x2DE1, 0x2DFF)
    + build_alphabet(0x2E00, 0x2E08)
    + _chars(0x2427, 0x2428, 0x2429, 0x302A, 0x302B, 0x2FFC, 0x2FFD, 0x2FFE, 0x2FFF, 0x3099)
    + _chars(0x309A, 0x309B, 0x309C, 0xA702, 0xAAB8, 0x061C, 0xA950, 0xA951, 0xA926, 0xA952)
)

# (name, alphabet, required size) in injection order
ALPHABETS: Tuple[Tuple[str, Tuple[str, ...], int], ...] = (
    ("day", DAY_ALPHABET, 31),
    ("month", MONTH_ALPHABET, 12),
    ("year", YEAR_ALPHABET, 100),
    ("hour", HOUR_ALPHABET, 24),
    ("minute", MINUTE_ALPHABET, 60),
)


# ============================================================
# Validation
# ============================================================

def validate_equal_lengths(name: str, mapping: Mapping[str, str]) -> None:
    for key, value in mapping.items():
        if len(key) != len(value):
            raise TableError(
                f"{name}: key {key!r} (len={len(key)}) and value {value!r} "
                f"(len={len(value)}) must have equal code point lengths"
            )


def validate_letter_map(mapping: Mapping[str, str]) -> None:
    for key, value in mapping.items():
        if len(key) != 1 or len(value) != 1:
            raise TableError(f"LETTER_MAP: {key!r} -> {value!r} must map one code point to one")
        if mapping.get(value) != key:
            raise TableError(f"LETTER_MAP: {key!r} -> {value!r} does not map back (not bijective)")
        for ch in (key, value):
            if not has_reversible_case(ch) or not case_stable(ch):
                raise TableError(f"LETTER_MAP: {ch!r} has no reversible case conversion")


def validate_unique_values(name: str, mapping: Mapping[str, str]) -> None:
    seen: Dict[str, str] = {}
    for key, value in mapping.items():
        folded = value.lower()
        if folded in seen:
            raise TableError(f"{name}: {seen[folded]!r} and {key!r} both map to {value!r}")
        seen[folded] = key


def validate_quoted_prefixes(name: str, mapping: Mapping[str, str]) -> None:
    # "'" + short followed by more letters must never read as "'" + longer
    quoted = sorted({v.lower() for v in mapping.values() if len(v) > 1}, key=len)
    for i, short in enumerate(quoted):
        for longer in quoted[i + 1:]:
            if len(longer) > len(short) and longer.startswith(short):
                raise TableError(
                    f"{name}: quoted value {short!r} is a prefix of {longer!r}, "
                    f"decoding could not tell them apart"
                )


def validate_wheels(
    one_rune: Mapping[str, Sequence[str]],
    two_rune: Mapping[str, Sequence[str]],
) -> None:
    owner: Dict[str, str] = {}
    for base, accents in one_rune.items():
        if not accents or accents[0] != base:
            raise TableError(f"ONE_RUNE_WHEEL[{base!r}] must start with its base vowel")
        for idx, form in enumerate(accents):
            if len(form) != 1:
                raise TableError(
                    f"ONE_RUNE_WHEEL[{base!r}][{idx}] = {form!r} has {len(form)} code points, expected 1"
                )
            up = to_upper(form)
            if to_lower(up) != form or to_upper(to_lower(up)) != up:
                raise TableError(f"ONE_RUNE_WHEEL[{base!r}][{idx}] = {form!r} has no reversible case")
            if form in owner:
                raise TableError(f"{form!r} appears in both the {owner[form]!r} and {base!r} wheels")
            owner[form] = base

    for base, accents in two_rune.items():
        for idx, form in enumerate(accents):
            if len(form) != 2:
                raise TableError(
                    f"TWO_RUNE_WHEEL[{base!r}][{idx}] = {form!r} has {len(form)} code points, expected 2"
                )
            if not has_reversible_case(form[0]):
                raise TableError(f"TWO_RUNE_WHEEL[{base!r}][{idx}] = {form!r} has no reversible case")


def validate_alphabets(alphabets: Iterable[Tuple[str, Sequence[str], int]]) -> None:
    owner: Dict[str, str] = {}
    for name, alphabet, size in alphabets:
        if len(alphabet) != size:
            raise TableError(f"{name} alphabet has {len(alphabet)} entries, expected {size}")
        for ch in alphabet:
            if len(ch) != 1:
                raise TableError(f"{name} alphabet entry {ch!r} must be a single code point")
            if ch in owner:
                raise TableError(f"U+{ord(ch):04X} appears in both the {owner[ch]} and {name} alphabets")
            owner[ch] = name


def validate_reserved(
    tables: Iterable[Tuple[str, Iterable[str]]],
    alphabets: Iterable[Tuple[str, Sequence[str], int]],
) -> None:
    used: Dict[str, str] = {}
    for name, strings in tables:
        for s in strings:
            for ch in s:
                if ch in RESERVED:
                    raise TableError(f"{name}: reserved code point U+{ord(ch):04X} may not appear in a table")
                used.setdefault(ch, name)

    for name, alphabet, _size in alphabets:
        for ch in alphabet:
            if ch in RESERVED:
                raise TableError(f"{name} alphabet: reserved code point U+{ord(ch):04X}")
            if ch in used:
                raise TableError(f"{name} alphabet: U+{ord(ch):04X} is also used by {used[ch]}")


def validate_tables(
    letter_map: Optional[Mapping[str, str]] = None,
    word_map: Optional[Mapping[str, str]] = None,
    punctuation_map: Optional[Mapping[str, str]] = None,
    one_rune_wheel: Optional[Mapping[str, Sequence[str]]] = None,
    two_rune_wheel: Optional[Mapping[str, Sequence[str]]] = None,
    alphabets: Optional[Sequence[Tuple[str, Sequence[str], int]]] = None,
) -> None:
    """
    Checks every invariant the codec relies on and raises TableError on the
    first violation. Arguments default to the module tables, so candidate
    tables can be checked before they are swapped in.
    """
    letter_map = LETTER_MAP if letter_map is None else letter_map
    word_map = WORD_MAP if word_map is None else word_map
    punctuation_map = PUNCTUATION_MAP if punctuation_map is None else punctuation_map
    one_rune_wheel = ONE_RUNE_WHEEL if one_rune_wheel is None else one_rune_wheel
    two_rune_wheel = TWO_RUNE_WHEEL if two_rune_wheel is None else two_rune_wheel
    alphabets = ALPHABETS if alphabets is None else alphabets

    maps = (("WORD_MAP", word_map), ("LETTER_MAP", letter_map), ("PUNCTUATION_MAP", punctuation_map))
    for name, mapping in maps:
        if not mapping:
            raise TableError(f"{name} is empty (no reverse mapping can be built)")

    validate_equal_lengths("WORD_MAP", word_map)
    validate_equal_lengths("LETTER_MAP", letter_map)
    validate_letter_map(letter_map)
    for name, mapping in maps:
        validate_unique_values(name, mapping)
        validate_quoted_prefixes(name, mapping)
    validate_wheels(one_rune_wheel, two_rune_wheel)
    validate_alphabets(alphabets)

    tables: List[Tuple[str, Iterable[str]]] = [
        (name, list(mapping.keys()) + list(mapping.values())) for name, mapping in maps
    ]
    for base, accents in one_rune_wheel.items():
        tables.append((f"ONE_RUNE_WHEEL[{base}]", accents))
    for base, accents in two_rune_wheel.items():
        tables.append((f"TWO_RUNE_WHEEL[{base}]", accents))
    validate_reserved(tables, alphabets)


validate_tables()
logger.debug(
    "tables ok: %d letters, %d words, %d punctuation marks, %d wheels",
    len(LETTER_MAP), len(WORD_MAP), len(PUNCTUATION_MAP), len(ONE_RUNE_WHEEL),
)
