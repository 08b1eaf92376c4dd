"""Reverse mode: the oracle guesses the player's character."""
