"""Game session engine.

- `parser.py`: Tagged-field parser for oracle replies
- `characters.py`: Character pool for classic mode
- `epoch.py`: Epoch guard discarding stale oracle completions
- `events.py`: Win signal channel
- `win.py`: Classic-mode win detection
- `protocols.py`: Oracle, WinDetector and QuestionStrategy interfaces
- `classic/`: ClassicGameSession
- `reverse/`: ReverseGameSession and question strategies

Import directly from submodules to avoid circular imports:
    from whoami.engine.classic.session import ClassicGameSession
    from whoami.engine.reverse.session import ReverseGameSession
"""

# Note: No eager imports to avoid circular import issues
