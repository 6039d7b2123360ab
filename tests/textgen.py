#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Seeded random generators shared by the property tests."""

import random
from typing import List

from pejelagarto import sanitize_bytes, split_trailing_timestamp
from pejelagarto_tables import (
    ALPHABETS,
    ONE_RUNE_WHEEL,
    PUNCTUATION_MAP,
    RESERVED,
    TWO_RUNE_WHEEL,
    WORD_MAP,
)

ALPHABET_CHARS = frozenset(ch for _name, alphabet, _size in ALPHABETS for ch in alphabet)
RESERVED_CHARS = sorted(RESERVED)

TARGET_LENGTHS = (2, 3, 5, 7, 11, 2 * 3, 2 * 2 * 3, 5 * 7 * 7)

# characters every stage has an opinion about
_INTERESTING: List[str] = (
    list("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789")
    + list(" \n\t-'\\")
    + list(PUNCTUATION_MAP.keys())
    + list(PUNCTUATION_MAP.values())
    + [form for wheel in ONE_RUNE_WHEEL.values() for form in wheel]
    + [form.upper() for wheel in ONE_RUNE_WHEEL.values() for form in wheel]
    + [form for wheel in TWO_RUNE_WHEEL.values() for form in wheel]
    + ["\u00AD", "\uFFF0", "\uFFF1", "\u3164", "\uE041", "İ", "ı", "\u212A", "ß", "ǅ"]
)

_WORDS = list(WORD_MAP.keys()) + [w.capitalize() for w in WORD_MAP] + [w.upper() for w in WORD_MAP]


def _random_code_point(rng: random.Random) -> str:
    while True:
        roll = rng.random()
        if roll < 0.5:
            ch = rng.choice(_INTERESTING)
        elif roll < 0.8:
            ch = chr(rng.randint(0x20, 0x2FF))
        elif roll < 0.95:
            ch = chr(rng.randint(0x300, 0xFFFF))
        else:
            ch = chr(rng.randint(0x10000, 0x10FFFF))
        if (len(ch) == 1 and 0xD800 <= ord(ch) <= 0xDFFF) or ch in ALPHABET_CHARS:
            continue
        return ch


def random_unicode(rng: random.Random, max_len: int = 60) -> str:
    """Any Unicode text with no alphabet code points and no trailing ISO-8601 line."""
    parts: List[str] = []
    for _ in range(rng.randint(0, max_len)):
        if rng.random() < 0.1:
            parts.append(rng.choice(_WORDS))
        else:
            parts.append(_random_code_point(rng))
    text = "".join(parts)
    if split_trailing_timestamp(text)[1]:
        text += "."
    return text


def random_digits(rng: random.Random, length: int) -> str:
    """Decimal numeral, optionally negative and zero-padded."""
    sign = "-" if rng.random() < 0.5 else ""
    zeros = "0" * rng.choice((0, 0, 1, 3))
    first = str(rng.randint(1, 9))
    rest = "".join(rng.choice("0123456789") for _ in range(max(0, length - 1)))
    return sign + zeros + first + rest


def random_numeric_text(rng: random.Random, max_numbers: int = 8) -> str:
    parts: List[str] = []
    for _ in range(rng.randint(1, max_numbers)):
        parts.append(random_digits(rng, rng.randint(1, 40)))
        parts.append(rng.choice([" ", "-", "--", "x", ", ", "٣", "."]))
    return "".join(parts)


def text_of_length(rng: random.Random, length: int) -> str:
    """Vowel-heavy text of exactly `length` code points."""
    pool = [form for wheel in ONE_RUNE_WHEEL.values() for form in wheel] + list("AEIOUWYbcdlmnst .,")
    return "".join(rng.choice(pool) for _ in range(length))


def reserved_or_alphabet_text(rng: random.Random, max_len: int = 30, alphabet: bool = False) -> str:
    pool = sorted(ALPHABET_CHARS) if alphabet else RESERVED_CHARS
    return "".join(rng.choice(pool) for _ in range(rng.randint(1, max_len)))


def random_bytes(rng: random.Random, max_len: int = 80) -> bytes:
    """Arbitrary bytes whose UTF-8 reading carries no alphabet code point."""
    while True:
        data = bytes(rng.randint(0, 255) for _ in range(rng.randint(0, max_len)))
        text = sanitize_bytes(data)
        if not any(ch in ALPHABET_CHARS for ch in text) and not split_trailing_timestamp(text)[1]:
            return data
