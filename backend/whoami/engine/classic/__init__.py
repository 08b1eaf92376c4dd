"""Classic mode: the player guesses the engine's secret character."""
