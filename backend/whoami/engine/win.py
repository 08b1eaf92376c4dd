"""
Classic-mode win detection.

The default rule is a plain case-insensitive substring check of the secret
name in the player's question. It has false positives ("Is your friend
Simba?" wins) and false negatives (misspellings, nicknames). It sits behind
the WinDetector protocol so an oracle-judged detector can replace it
without touching the session state machine.
"""


class SubstringWinDetector:
    """Win when the question text contains the character's name.

    Example:
        >>> import asyncio
        >>> asyncio.run(SubstringWinDetector().is_win("Are you SIMBA?", "Simba"))
        True
    """

    async def is_win(self, question: str, character: str) -> bool:
        """
        Args:
            question: The player's literal question text
            character: The secret character

        Returns:
            True if the question names the character
        """
        name = character.strip().lower()
        if not name:
            return False
        return name in question.lower()
