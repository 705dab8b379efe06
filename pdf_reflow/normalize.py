"""Text normalization: reflow raw page text into clean paragraphs.

The normalizer is a fixed sequence of stages. Each stage is a plain
function from text to text, so any stage can be tested on its own:

    1. protect_volatile_spans       URLs, e-mails and link targets -> tokens
    2. undo_hyphenation             "exam-\\nple" -> "example"
    3. mark_paragraphs              blank lines -> paragraph token
    4. collapse_line_breaks         remaining "\\n" -> " "
    5. respace                      curated missing-space rules
    6. restore_paragraphs           paragraph token -> "\\n\\n"
    7. collapse_whitespace          space runs and blank-line runs
    8. normalize_punctuation_spacing
    9. restore_protected_spans      tokens -> original text

Paragraph boundaries must be marked before single line breaks are
collapsed, and volatile spans must stay protected until punctuation
spacing is done. Tokens are built from private-use characters that do not
occur in the input, so they can never collide with document text.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .errors import PlaceholderLeak

logger = logging.getLogger(__name__)

_LATIN = [chr(c) for c in range(0x250)]
LOWER = "".join(re.escape(c) for c in _LATIN if c.isalpha() and c.islower())
UPPER = "".join(re.escape(c) for c in _LATIN if c.isalpha() and c.isupper())
LETTER = LOWER + UPPER

LINK_TARGET_RE = re.compile(r"(?<=\]\()[^\s()]+(?=\))")
URL_RE = re.compile(r"(?:(?:https?|ftp)://|www\.)[^\s<>\[\]()\"']+", re.IGNORECASE)
EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
URL_TRAILING_PUNCTUATION = ".,;:!?"

# Letter on both sides only, so ranges like "2019-\n2020" keep their hyphen
HYPHEN_BREAK_RE = re.compile(rf"(?<=[{LETTER}])-\n(?=[{LETTER}])")
PARAGRAPH_BREAK_RE = re.compile(r"[^\S\n]*\n(?:[^\S\n]*\n)+[^\S\n]*")
LINE_BREAK_RE = re.compile(r"[^\S\n]*\n[^\S\n]*")


def _delimiter_pairs() -> Iterator[Tuple[str, str]]:
    for code in range(0xE000, 0xF8FF, 2):
        yield chr(code), chr(code + 1)


class PlaceholderTable:
    """Reversible substitutions for one normalize_text call.

    Tokens look like ``<open>u3<close>`` where the delimiters are the first
    pair of private-use characters absent from the text being normalized.
    """

    def __init__(self, text: str):
        for opening, closing in _delimiter_pairs():
            if opening not in text and closing not in text:
                break
        else:
            raise ValueError("No free placeholder delimiters for this text")
        self.opening = opening
        self.closing = closing
        self.paragraph = f"{opening}p{closing}"
        self.spans: Dict[str, str] = {}
        self._leak_re = re.compile(f"{opening}[a-z]*\\d*{closing}|[{opening}{closing}]")

    def protect(self, original: str) -> str:
        token = f"{self.opening}u{len(self.spans)}{self.closing}"
        self.spans[token] = original
        return token

    def restore(self, text: str) -> str:
        for token, original in self.spans.items():
            text = text.replace(token, original)
        return text

    def find_leaks(self, text: str) -> List[str]:
        return self._leak_re.findall(text)


@dataclass(frozen=True)
class RespacingRule:
    """One curated rule inserting a missing space."""
    name: str
    pattern: re.Pattern
    replacement: str = " "

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text)


# Both rules only fire before a capitalised word, and the lowercase side must
# be a run of three letters, so "iPhone", "GitHub" and "U.S.A" stay intact.
DEFAULT_RESPACING_RULES: Tuple[RespacingRule, ...] = (
    RespacingRule(
        "lowercase-capital",
        re.compile(rf"(?<=[{LOWER}]{{3}})(?=[{UPPER}][{LOWER}]{{2}})"),
    ),
    RespacingRule(
        "sentence-capital",
        re.compile(rf"(?<=[{LOWER}]{{2}}[.!?])(?=[{UPPER}][{LOWER}])"),
    ),
)

ROMANIAN_RESPACING_RULES: Tuple[RespacingRule, ...] = (
    RespacingRule("ro-article-capital", re.compile(rf"(?<=[{LOWER}]ul)(?=[{UPPER}])")),
    # Only "să" + "i/î"; a broader "că" rule used to split "către".
    RespacingRule("ro-sa-pronoun", re.compile(r"(?<=\bsă)(?=[îi])")),
)


def protect_volatile_spans(text: str, table: PlaceholderTable) -> str:
    """Stage 1: replace link targets, URLs and e-mail addresses with tokens."""
    text = LINK_TARGET_RE.sub(lambda m: table.protect(m.group(0)), text)

    def protect_url(match: re.Match) -> str:
        url = match.group(0)
        stripped = url.rstrip(URL_TRAILING_PUNCTUATION)
        return table.protect(stripped) + url[len(stripped):]

    text = URL_RE.sub(protect_url, text)
    return EMAIL_RE.sub(lambda m: table.protect(m.group(0)), text)


def undo_hyphenation(text: str) -> str:
    """Stage 2: rejoin words split by a hyphen at the end of a line."""
    return HYPHEN_BREAK_RE.sub("", text)


def mark_paragraphs(text: str, table: PlaceholderTable) -> str:
    """Stage 3: turn each run of two or more line breaks into one token."""
    return PARAGRAPH_BREAK_RE.sub(table.paragraph, text)


def collapse_line_breaks(text: str) -> str:
    """Stage 4: a remaining single line break is a wrap, not a boundary."""
    return LINE_BREAK_RE.sub(" ", text)


def respace(text: str, rules: Sequence[RespacingRule] = DEFAULT_RESPACING_RULES) -> str:
    """Stage 5: apply the curated missing-space rules in order."""
    for rule in rules:
        text = rule.apply(text)
    return text


def restore_paragraphs(text: str, table: PlaceholderTable) -> str:
    """Stage 6."""
    return text.replace(table.paragraph, "\n\n")


def collapse_whitespace(text: str) -> str:
    """Stage 7: one space per horizontal run, at most one blank line."""
    text = re.sub(r"[^\S\n]+", " ", text)
    text = re.sub(r" ?\n ?", "\n", text)
    return re.sub(r"\n{3,}", "\n\n", text)


def normalize_punctuation_spacing(text: str) -> str:
    """Stage 8: no space before , ! ? ; : and exactly one before a letter after."""
    text = re.sub(r"[^\S\n]+([,!?;:])", r"\1", text)
    return re.sub(rf"([,!?;:])[^\S\n]*(?=[{LETTER}])", r"\1 ", text)


def restore_protected_spans(text: str, table: PlaceholderTable) -> str:
    """Stage 9: put every protected span back verbatim."""
    return table.restore(text)


def normalize_text(
    text: str,
    rules: Optional[Sequence[RespacingRule]] = None,
) -> str:
    """Reflow raw page text into paragraphs separated by blank lines.

    Args:
        text: Raw page text, possibly already carrying Markdown links.
        rules: Re-spacing rules for stage 5; defaults to
            DEFAULT_RESPACING_RULES.

    Returns:
        str: The normalized, stripped text.

    Raises:
        PlaceholderLeak: If a token survives restoration.
    """
    if rules is None:
        rules = DEFAULT_RESPACING_RULES
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    table = PlaceholderTable(text)

    text = protect_volatile_spans(text, table)
    text = undo_hyphenation(text)
    text = mark_paragraphs(text, table)
    text = collapse_line_breaks(text)
    text = respace(text, rules)
    text = restore_paragraphs(text, table)
    text = collapse_whitespace(text)
    text = normalize_punctuation_spacing(text)
    text = restore_protected_spans(text, table)

    leaks = table.find_leaks(text)
    if leaks:
        raise PlaceholderLeak(leaks)
    logger.debug("Normalized text with %d protected span(s)", len(table.spans))
    return text.strip()
