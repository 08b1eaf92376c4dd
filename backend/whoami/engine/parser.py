"""
Tagged-field parser for oracle replies.

The oracle is asked to wrap structured fields in XML-like tags such as
``<ANSWER> YES </ANSWER>``. Models do not always comply, so every decision
has a lexical fallback and the parser never raises on malformed input.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from whoami.models.game import ClassicAnswer, ParsedAnswer


def _compile_tag(tag: str) -> re.Pattern[str]:
    name = re.escape(tag)
    return re.compile(
        rf"<\s*{name}\s*>\s*(.*?)\s*<\s*/\s*{name}\s*>",
        re.IGNORECASE | re.DOTALL,
    )


# Compiled once at import for every tag the engine reads
TAG_PATTERNS: dict[str, re.Pattern[str]] = {
    tag: _compile_tag(tag)
    for tag in ("ANSWER", "REASONING", "QUESTION", "GUESS", "SHOULD_GUESS")
}


def _tag_pattern(tag: str) -> re.Pattern[str]:
    return TAG_PATTERNS.get(tag.upper()) or _compile_tag(tag)


class ResponseParser:
    """Extract structured decisions from free-text oracle replies.

    The parser is pure: the same text and field definition always produce the
    same result.

    Example:
        >>> parser = ResponseParser()
        >>> parser.parse_answer("<reasoning>He is a lion</reasoning><answer> yes </answer>")
        ParsedAnswer(answer='YES', reasoning='He is a lion', tagged=True)
        >>> parser.parse_answer("Nope, no way").answer
        'NO'
    """

    ANSWER_TAG = "ANSWER"
    REASONING_TAG = "REASONING"
    QUESTION_TAG = "QUESTION"
    GUESS_TAG = "GUESS"
    SHOULD_GUESS_TAG = "SHOULD_GUESS"

    CLASSIC_ANSWERS: tuple[str, ...] = (
        ClassicAnswer.YES.value,
        ClassicAnswer.NO.value,
        ClassicAnswer.NOT_VALID.value,
    )

    def extract_tag(self, text: str | None, tag: str) -> str | None:
        """Return the trimmed content of the first ``<tag>...</tag>``.

        Args:
            text: Raw oracle reply
            tag: Tag name, matched case-insensitively

        Returns:
            The captured content, or None when the tag is absent
        """
        if not text:
            return None
        match = _tag_pattern(tag).search(text)
        if match is None:
            return None
        return match.group(1).strip()

    def classify_yes_no(self, text: str | None, invalid: str) -> str:
        """Lexical fallback: 'yes' without 'no' is YES and vice versa."""
        lowered = (text or "").lower()
        has_yes = "yes" in lowered
        has_no = "no" in lowered
        if has_yes and not has_no:
            return "YES"
        if has_no and not has_yes:
            return "NO"
        return invalid

    def parse_decision(
        self,
        text: str | None,
        tag: str,
        allowed: Iterable[str],
        invalid: str,
    ) -> tuple[str, bool]:
        """Parse a closed-vocabulary field with lexical fallback.

        Args:
            text: Raw oracle reply
            tag: Name of the tag holding the decision
            allowed: Recognized values (upper case)
            invalid: Sentinel returned when nothing can be recognized

        Returns:
            Tuple of (decision, whether it came from the tag)
        """
        content = self.extract_tag(text, tag)
        if content is not None:
            value = content.upper()
            if value in set(allowed):
                return value, True
        return self.classify_yes_no(text, invalid), False

    def extract_reasoning(self, text: str | None) -> str | None:
        """Informational only; never used for control flow."""
        return self.extract_tag(text, self.REASONING_TAG)

    def parse_answer(self, text: str | None) -> ParsedAnswer:
        """Parse a classic-mode reply into YES | NO | NOT_VALID."""
        answer, tagged = self.parse_decision(
            text,
            self.ANSWER_TAG,
            self.CLASSIC_ANSWERS,
            ClassicAnswer.NOT_VALID.value,
        )
        reasoning = self.extract_reasoning(text)
        if reasoning is None and text:
            reasoning = text.strip()
        return ParsedAnswer(answer=answer, reasoning=reasoning, tagged=tagged)

    def parse_yes_no(self, text: str | None, tag: str) -> bool | None:
        """Strict YES/NO field such as ``<SHOULD_GUESS>``.

        Returns:
            True for YES, False for NO, None if the tag is missing or holds
            anything else
        """
        content = self.extract_tag(text, tag)
        if content is None:
            return None
        value = content.upper()
        if value == "YES":
            return True
        if value == "NO":
            return False
        return None
