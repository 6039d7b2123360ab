# pejelagarto.py
# Pejelagarto - reversible Human <-> Pejelagarto text codec
#
# Encoding pipeline:
#   sanitize bytes -> scrub invisible timestamp -> detach trailing ISO-8601 line
#   -> numbers -> punctuation -> letters/digraphs -> accents -> case flip
#   -> inject invisible timestamp
# Decoding runs the inverse of every stage in reverse order, then reattaches the
# recovered timestamp as a last line and restores the original bytes.
#
# The codec is not a cipher: there is no key and nothing is secret. Every stage
# is a pure function of its input (the injector also reads the clock and a PRNG).

from __future__ import annotations

import logging
import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from random import Random
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pejelagarto_tables import (
    ALPHABETS,
    BYTE_BASE,
    BYTE_MARKER,
    INTERNAL_ESCAPE,
    LETTER_MAP,
    MARKER_CLOSE,
    MARKER_OPEN,
    ONE_RUNE_WHEEL,
    OUTPUT_ESCAPE,
    PUNCTUATION_MAP,
    QUOTE,
    WORD_MAP,
    YEAR_BASE,
    TableError,
    case_stable,
    to_lower,
    to_upper,
)

logger = logging.getLogger(__name__)


# ============================================================
# Byte sanitizer (invalid UTF-8 <-> BYTE_MARKER + private use char)
# ============================================================

def _is_escaped_byte(ch: str) -> bool:
    # surrogateescape turns invalid byte b into U+DC00+b (b >= 0x80)
    return 0xDC80 <= ord(ch) <= 0xDCFF


def _is_byte_slot(ch: str) -> bool:
    return BYTE_BASE <= ord(ch) < BYTE_BASE + 256


def text_to_bytes(text: str) -> bytes:
    """
    UTF-8 bytes of text that never raises. Lone surrogates U+DC80..U+DCFF go back
    to the byte they escape (surrogateescape); any other surrogate is written
    with surrogatepass.
    """
    try:
        return text.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        pass
    out = bytearray()
    for ch in text:
        if _is_escaped_byte(ch):
            out.append(ord(ch) - 0xDC00)
        else:
            out.extend(ch.encode("utf-8", "surrogatepass"))
    return bytes(out)


def sanitize_bytes(data: bytes) -> str:
    """
    Decodes UTF-8, replacing every byte that is not part of a valid sequence with
    the pair BYTE_MARKER, chr(BYTE_BASE + byte). A literal BYTE_MARKER is doubled
    whenever the next character could otherwise be read as part of such a pair.
    """
    text = bytes(data).decode("utf-8", "surrogateescape")
    if BYTE_MARKER not in text and not any(_is_escaped_byte(ch) for ch in text):
        return text

    out: List[str] = []
    n = len(text)
    for i, ch in enumerate(text):
        if _is_escaped_byte(ch):
            out.append(BYTE_MARKER)
            out.append(chr(BYTE_BASE + (ord(ch) - 0xDC00)))
        elif ch == BYTE_MARKER:
            nxt = text[i + 1] if i + 1 < n else ""
            if nxt and (nxt == BYTE_MARKER or _is_byte_slot(nxt) or _is_escaped_byte(nxt)):
                out.append(BYTE_MARKER)
            out.append(BYTE_MARKER)
        else:
            out.append(ch)
    return "".join(out)


def unsanitize_bytes(text: str) -> bytes:
    """Inverse of sanitize_bytes. Never raises: stray surrogates go through text_to_bytes."""
    out = bytearray()
    run: List[str] = []

    def flush() -> None:
        if run:
            out.extend(text_to_bytes("".join(run)))
            run.clear()

    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == BYTE_MARKER and i + 1 < n:
            nxt = text[i + 1]
            if nxt == BYTE_MARKER:
                run.append(BYTE_MARKER)
                i += 2
                continue
            if _is_byte_slot(nxt):
                flush()
                out.append(ord(nxt) - BYTE_BASE)
                i += 2
                continue
        run.append(ch)
        i += 1
    flush()
    return bytes(out)


# ============================================================
# Escaping
# ============================================================

_ESCAPE_CHARS = (INTERNAL_ESCAPE, OUTPUT_ESCAPE)


def _escape_with(text: str, escape: str, chars: str) -> str:
    if not any(c in text for c in chars):
        return text
    return "".join(escape + ch if ch in chars else ch for ch in text)


def _unescape_with(text: str, escape: str) -> str:
    if escape not in text:
        return text
    out: List[str] = []
    i = 0
    n = len(text)
    while i < n:
        if text[i] == escape and i + 1 < n:
            out.append(text[i + 1])
            i += 2
        else:
            out.append(text[i])
            i += 1
    return "".join(out)


def output_escape(text: str) -> str:
    """Protects literal quotes (and the soft hyphen itself) in Human text."""
    return _escape_with(text, OUTPUT_ESCAPE, QUOTE + OUTPUT_ESCAPE)


def output_unescape(text: str) -> str:
    return _unescape_with(text, OUTPUT_ESCAPE)


# ============================================================
# Substitution engine
# ============================================================

@dataclass(frozen=True)
class Rule:
    index: int
    key: str
    value: str

    @property
    def quoted(self) -> bool:
        return self.key.startswith(QUOTE)


@dataclass(frozen=True)
class RuleSet:
    name: str
    rules: Tuple[Rule, ...]
    forward: Tuple[Rule, ...]
    inverse: Tuple[Rule, ...]


def _coded(value: str) -> str:
    return QUOTE + value if len(value) > 1 else value


def _sorted_rules(rules: Sequence[Rule], to_pejelagarto: bool) -> Tuple[Rule, ...]:
    # forward: positive indices first, inverse: negative first; then larger
    # |index|, longer key, lexicographic
    def sort_key(rule: Rule) -> Tuple[int, int, int, str]:
        positive = rule.index > 0
        group = 0 if positive == to_pejelagarto else 1
        return (group, -abs(rule.index), -len(rule.key), rule.key)

    return tuple(sorted(rules, key=sort_key))


def rule_order(ruleset: RuleSet, to_pejelagarto: bool) -> List[Tuple[int, str, str]]:
    """(index, key, value) in the exact order the engine applies them."""
    rules = ruleset.forward if to_pejelagarto else ruleset.inverse
    return [(r.index, r.key, r.value) for r in rules]


def build_ruleset(name: str, *mappings: Mapping[str, str]) -> RuleSet:
    """
    Indexes one or more maps by signed length: +len(key) for key -> coded value,
    -len(coded value) for coded value -> key. Multi code point values are coded
    with a leading QUOTE, so their inverse index is -(len + 1).
    """
    table: Dict[int, Dict[str, str]] = {}
    for mapping in mappings:
        for key, value in mapping.items():
            coded = _coded(value)
            for index, src, dst in ((len(key), key, coded), (-len(coded), coded, key)):
                slot = table.setdefault(index, {})
                if slot.get(src, dst) != dst:
                    raise TableError(f"{name}: {src!r} maps to both {slot[src]!r} and {dst!r} at index {index}")
                slot[src] = dst

    if not any(index < 0 for index in table):
        raise TableError(f"{name}: empty reverse mapping")

    rules = tuple(
        Rule(index, src, dst)
        for index in sorted(table)
        for src, dst in sorted(table[index].items())
    )
    return RuleSet(name, rules, _sorted_rules(rules, True), _sorted_rules(rules, False))


LETTER_RULES = build_ruleset("letters", WORD_MAP, LETTER_MAP)
PUNCTUATION_RULES = build_ruleset("punctuation", PUNCTUATION_MAP)


def match_case(source: str, replacement: str) -> str:
    """
    Copies the case pattern of source onto replacement position by position,
    skipping a leading QUOTE on either side. A conversion is applied only when
    it round-trips for that code point.
    """
    src = source[1:] if source.startswith(QUOTE) else source
    head = QUOTE if replacement.startswith(QUOTE) else ""
    out: List[str] = []
    for i, ch in enumerate(replacement[len(head):]):
        if i < len(src):
            s = src[i]
            if s.isupper():
                up = to_upper(ch)
                if to_upper(to_lower(up)) == up:
                    ch = up
            elif s.islower():
                low = to_lower(ch)
                if to_lower(to_upper(low)) == low:
                    ch = low
        out.append(ch)
    return head + "".join(out)


def _escaped_positions(chars: Sequence[str]) -> List[bool]:
    escaped = [False] * len(chars)
    for i in range(len(chars) - 1):
        if chars[i] in _ESCAPE_CHARS:
            escaped[i] = True
            escaped[i + 1] = True
    return escaped


def _marker_depths(chars: Sequence[str], escaped: Sequence[bool]) -> List[int]:
    depths: List[int] = []
    depth = 0
    for ch, esc in zip(chars, escaped):
        depths.append(depth)
        if not esc:
            if ch == MARKER_OPEN:
                depth += 1
            elif ch == MARKER_CLOSE:
                depth -= 1
    return depths


def _quoted_word_flags(chars: Sequence[str], escaped: Sequence[bool], depths: Sequence[int]) -> List[bool]:
    # flags[i]: the word holding position i already saw an unescaped quote at depth 0
    flags: List[bool] = []
    inside = False
    for ch, esc, depth in zip(chars, escaped, depths):
        flags.append(inside)
        if ch == QUOTE:
            inside = not esc and depth == 0
        elif not ch.isalpha():
            inside = False
    return flags


def _apply_rule(text: str, rule: Rule) -> str:
    chars = list(text)
    n = len(chars)
    k = len(rule.key)
    folded = [to_lower(c) for c in rule.key]
    quoted_key = rule.quoted

    escaped = _escaped_positions(chars)
    depths = _marker_depths(chars, escaped)
    in_quote = _quoted_word_flags(chars, escaped, depths)

    def matches(pos: int) -> bool:
        if pos + k > n:
            return False
        for j in range(k):
            c = chars[pos + j]
            if escaped[pos + j] or depths[pos + j] > 0:
                return False
            if c == QUOTE and not quoted_key:
                return False
            if to_lower(c) != folded[j] or not case_stable(c):
                return False
        return True

    out: List[str] = []
    pos = 0
    while pos < n:
        if escaped[pos] or depths[pos] > 0 or (in_quote[pos] and not quoted_key):
            out.append(chars[pos])
            pos += 1
        elif matches(pos):
            out.append(MARKER_OPEN)
            out.append(match_case("".join(chars[pos:pos + k]), rule.value))
            out.append(MARKER_CLOSE)
            pos += k
        else:
            out.append(chars[pos])
            pos += 1
    return "".join(out)


def _strip_markers(text: str) -> str:
    # drops unescaped markers and undoes the internal escape in one pass
    out: List[str] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == INTERNAL_ESCAPE and i + 1 < n:
            out.append(text[i + 1])
            i += 2
            continue
        if ch != MARKER_OPEN and ch != MARKER_CLOSE:
            out.append(ch)
        i += 1
    return "".join(out)


def apply_rules(text: str, rules: Sequence[Rule]) -> str:
    """Runs every rule once, in order, never re-matching text a previous rule produced."""
    work = _escape_with(text, INTERNAL_ESCAPE, INTERNAL_ESCAPE + MARKER_OPEN + MARKER_CLOSE)
    for rule in rules:
        if to_lower(rule.key[0]) not in work.lower():
            continue
        work = _apply_rule(work, rule)
    return _strip_markers(work)


def letters_to_pejelagarto(text: str) -> str:
    return apply_rules(output_escape(text), LETTER_RULES.forward)


def letters_from_pejelagarto(text: str) -> str:
    return output_unescape(apply_rules(text, LETTER_RULES.inverse))


def punctuation_to_pejelagarto(text: str) -> str:
    return apply_rules(output_escape(text), PUNCTUATION_RULES.forward)


def punctuation_from_pejelagarto(text: str) -> str:
    return output_unescape(apply_rules(text, PUNCTUATION_RULES.inverse))


# ============================================================
# Numbers (positive: base 10 <-> 8, negative: base 10 <-> 7)
# ============================================================

_DIGITS = "0123456789"
_CHUNK = 256  # digits per int()/str() call, keeps clear of the int<->str digit limit

# optional sign, leading zeros, remaining ASCII digits; at least one digit
_DIGIT_RUN = re.compile(r"(-?)(?=[0-9])(0*)([0-9]*)")


def _parse_digits(digits: str, base: int) -> int:
    value = 0
    for start in range(0, len(digits), _CHUNK):
        chunk = digits[start:start + _CHUNK]
        value = value * base ** len(chunk) + int(chunk, base)
    return value


def _small_digits(value: int, base: int) -> str:
    if base == 10:
        return str(value)
    out: List[str] = []
    while value:
        value, r = divmod(value, base)
        out.append(_DIGITS[r])
    return "".join(reversed(out)) or "0"


def _format_digits(value: int, base: int) -> str:
    if base == 8:
        return format(value, "o")
    step = base ** _CHUNK
    pieces: List[str] = []
    while value >= step:
        value, rem = divmod(value, step)
        pieces.append(_small_digits(rem, base).rjust(_CHUNK, "0"))
    pieces.append(_small_digits(value, base))
    return "".join(reversed(pieces))


def _in_base(digits: str, base: int) -> bool:
    top = _DIGITS[base - 1]
    return all(d <= top for d in digits)


def numbers_to_pejelagarto(text: str) -> str:
    """Re-emits ASCII decimal runs: positive in base 8, negative in base 7. Leading zeros stay."""
    def convert(m: re.Match) -> str:
        sign, zeros, digits = m.groups()
        if not digits:
            return m.group(0)
        base = 7 if sign else 8
        return sign + zeros + _format_digits(_parse_digits(digits, 10), base)

    return _DIGIT_RUN.sub(convert, text)


def numbers_from_pejelagarto(text: str) -> str:
    """
    Reads base 8 (positive) or base 7 (negative) runs back to decimal. A run
    holding a digit outside its base is not a coded number and is left alone.
    """
    def convert(m: re.Match) -> str:
        sign, zeros, digits = m.groups()
        base = 7 if sign else 8
        if not digits or not _in_base(digits, base):
            return m.group(0)
        return sign + zeros + _format_digits(_parse_digits(digits, base), 10)

    return _DIGIT_RUN.sub(convert, text)


# ============================================================
# Accent rotation (prime factorization of the length)
# ============================================================

# accented form -> (base vowel, wheel index)
_WHEEL_INDEX: Dict[str, Tuple[str, int]] = {
    form: (base, idx) for base, wheel in ONE_RUNE_WHEEL.items() for idx, form in enumerate(wheel)
}


def prime_factors(n: int) -> Dict[int, int]:
    """{prime: exponent} in ascending prime order; empty for n <= 1."""
    factors: Dict[int, int] = {}
    if n <= 1:
        return factors
    while n % 2 == 0:
        factors[2] = factors.get(2, 0) + 1
        n //= 2
    p = 3
    while p * p <= n:
        while n % p == 0:
            factors[p] = factors.get(p, 0) + 1
            n //= p
        p += 2
    if n > 1:
        factors[n] = factors.get(n, 0) + 1
    return factors


def is_vowel(ch: str) -> bool:
    low = to_lower(ch)
    if ch.isupper() and to_upper(low) != ch:
        return False
    # two code point wheel entries never equal a single char; their base letter counts instead
    return low in _WHEEL_INDEX


def _rotate_accents(text: str, direction: int) -> str:
    factors = prime_factors(len(text))
    if not factors:
        return text
    vowels = [i for i, ch in enumerate(text) if is_vowel(ch)]
    if not vowels:
        return text

    chars = list(text)
    for prime, power in factors.items():
        if prime - 1 >= len(vowels):
            continue
        pos = vowels[prime - 1]
        ch = chars[pos]
        entry = _WHEEL_INDEX.get(to_lower(ch))
        if entry is None:
            continue
        base, idx = entry
        wheel = ONE_RUNE_WHEEL[base]
        form = wheel[(idx + direction * power) % len(wheel)]
        if ch.isupper():
            up = to_upper(form)
            if to_lower(up) == form:
                form = up
        chars[pos] = form
    return "".join(chars)


def accents_to_pejelagarto(text: str) -> str:
    return _rotate_accents(text, 1)


def accents_from_pejelagarto(text: str) -> str:
    return _rotate_accents(text, -1)


# ============================================================
# Case flip (Fibonacci / Tribonacci positions)
# ============================================================

def fibonacci_positions(limit: int) -> List[int]:
    """1-indexed positions 1, 2, 3, 5, 8, ... up to limit."""
    seq: List[int] = []
    a, b = 1, 2
    while a <= limit:
        seq.append(a)
        a, b = b, a + b
    return seq


def tribonacci_positions(limit: int) -> List[int]:
    """1-indexed positions 1, 2, 4, 7, 13, ... up to limit."""
    seq: List[int] = []
    a, b, c = 1, 2, 4
    while a <= limit:
        seq.append(a)
        a, b, c = b, c, a + b + c
    return seq


def _is_word_char(ch: str) -> bool:
    return ch.isalpha() or ch.isdecimal()


def count_words(text: str) -> int:
    words = 0
    in_word = False
    for ch in text:
        if _is_word_char(ch):
            if not in_word:
                words += 1
            in_word = True
        else:
            in_word = False
    return words


def _invert_case(ch: str) -> str:
    low = to_lower(ch)
    if low != ch and to_upper(low) == ch:
        return low
    up = to_upper(ch)
    if up != ch and to_lower(up) == ch:
        return up
    return ch


def flip_case(text: str) -> str:
    """Self-inverse: word count and length never change under the flip."""
    words = count_words(text)
    if words == 0:
        return text
    positions = fibonacci_positions(len(text)) if words % 2 else tribonacci_positions(len(text))
    chars = list(text)
    for p in positions:
        chars[p - 1] = _invert_case(chars[p - 1])
    return "".join(chars)


# ============================================================
# Timestamps (visible trailing line, invisible code points)
# ============================================================

_SYSTEM_RANDOM = secrets.SystemRandom()

ISO8601_LINE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}(?:Z|[+-][0-9]{2}:[0-9]{2})")

# code point -> (alphabet slot, offset); slots follow ALPHABETS order
_ALPHABET_INDEX: Dict[str, Tuple[int, int]] = {
    ch: (slot, offset)
    for slot, (_name, alphabet, _size) in enumerate(ALPHABETS)
    for offset, ch in enumerate(alphabet)
}


def split_trailing_timestamp(text: str) -> Tuple[str, str]:
    """Detaches the last line when it is an ISO-8601 instant. Returns (rest, timestamp or "")."""
    head, _sep, last = text.rpartition("\n")
    if ISO8601_LINE.fullmatch(last):
        return head, last
    return text, ""


def join_trailing_timestamp(text: str, timestamp: str) -> str:
    if not timestamp:
        return text
    if not text:
        return timestamp
    return text + "\n" + timestamp


def strip_invisible_timestamp(text: str) -> str:
    """Removes every code point of the five timestamp alphabets, leaving the rest untouched."""
    if not any(ch in _ALPHABET_INDEX for ch in text):
        return text
    return "".join(ch for ch in text if ch not in _ALPHABET_INDEX)


def read_invisible_timestamp(text: str) -> str:
    """
    Rebuilds YYYY-MM-DDTHH:MM:00Z from the first code point of each alphabet
    found in text. Day, month and year are required (else ""); hour and minute
    default to 0.
    """
    found: List[Optional[int]] = [None] * len(ALPHABETS)
    for ch in text:
        entry = _ALPHABET_INDEX.get(ch)
        if entry is not None and found[entry[0]] is None:
            found[entry[0]] = entry[1]

    day, month, year, hour, minute = found
    if day is None or month is None or year is None:
        return ""
    return "%04d-%02d-%02dT%02d:%02d:00Z" % (
        YEAR_BASE + year, month + 1, day + 1, hour or 0, minute or 0,
    )


def parse_timestamp(timestamp: str) -> Optional[datetime]:
    """ISO-8601 instant -> aware UTC datetime, or None when it does not parse."""
    if not ISO8601_LINE.fullmatch(timestamp):
        return None
    try:
        when = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return None
    return when.astimezone(timezone.utc)


def _utc(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def timestamp_code_points(when: datetime) -> List[str]:
    """One code point per alphabet; an out-of-range offset snaps to 0."""
    offsets = (when.day - 1, when.month - 1, when.year - YEAR_BASE, when.hour, when.minute)
    marks: List[str] = []
    for offset, (_name, alphabet, _size) in zip(offsets, ALPHABETS):
        if offset < 0 or offset >= len(alphabet):
            offset = 0
        marks.append(alphabet[offset])
    return marks


def inject_invisible_timestamp(
    text: str,
    timestamp: str = "",
    now: Optional[datetime] = None,
    rng: Optional[Random] = None,
) -> str:
    """
    Inserts the five timestamp code points at randomly chosen word boundaries:
    index 0, right after a space or newline, and the end of text. Uses timestamp
    when it parses, else now (default: the current UTC time).
    """
    when = parse_timestamp(timestamp) if timestamp else None
    if when is None:
        when = _utc(now)
    marks = timestamp_code_points(when)

    positions = sorted({0, len(text)} | {i + 1 for i, ch in enumerate(text) if ch in " \n"})
    (rng or _SYSTEM_RANDOM).shuffle(positions)
    chosen = sorted(positions[:len(marks)])

    chars = list(text)
    for i in range(len(chosen) - 1, -1, -1):
        chars.insert(chosen[i], marks[i])
    chars.extend(marks[len(chosen):])
    return "".join(chars)


# ============================================================
# Public API
# ============================================================

def encode(data: Union[bytes, str], now: Optional[datetime] = None, rng: Optional[Random] = None) -> str:
    """Human bytes -> Pejelagarto text. A str is converted with text_to_bytes."""
    if isinstance(data, str):
        data = text_to_bytes(data)
    text = sanitize_bytes(data)
    text = strip_invisible_timestamp(text)
    text, timestamp = split_trailing_timestamp(text)
    text = numbers_to_pejelagarto(text)
    text = punctuation_to_pejelagarto(text)
    text = letters_to_pejelagarto(text)
    text = accents_to_pejelagarto(text)
    text = flip_case(text)
    out = inject_invisible_timestamp(text, timestamp, now=now, rng=rng)
    logger.debug("encode: %d bytes -> %d code points (timestamp line: %s)", len(data), len(out), timestamp or "none")
    return out


def decode(text: str) -> bytes:
    """Pejelagarto text -> Human bytes. A recovered invisible timestamp becomes the last line."""
    timestamp = read_invisible_timestamp(text)
    work = strip_invisible_timestamp(text)
    work = flip_case(work)
    work = accents_from_pejelagarto(work)
    work = letters_from_pejelagarto(work)
    work = punctuation_from_pejelagarto(work)
    work = numbers_from_pejelagarto(work)
    work = join_trailing_timestamp(work, timestamp)
    data = unsanitize_bytes(work)
    logger.debug("decode: %d code points -> %d bytes (timestamp: %s)", len(text), len(data), timestamp or "none")
    return data


def to_pejelagarto(text: str, now: Optional[datetime] = None, rng: Optional[Random] = None) -> str:
    """Text in, text out. Lone surrogates from surrogateescape map back to their bytes."""
    return encode(text_to_bytes(text), now=now, rng=rng)


def from_pejelagarto(text: str) -> str:
    return decode(text).decode("utf-8", "surrogateescape")
