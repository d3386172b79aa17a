"""UI configuration constants.

Centralizes magic numbers and display strings for the UI module.
"""


class LogLevel:
    """Log level constants with numeric values for comparison.

    Standard logging hierarchy: DEBUG < INFO < WARNING < ERROR
    Lower numeric value = more verbose (shows more messages).
    """

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    _names = {
        DEBUG: "DEBUG",
        INFO: "INFO",
        WARNING: "WARNING",
        ERROR: "ERROR",
    }

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def name(cls, level: int) -> str:
        """Get the name for a log level."""
        return cls._names.get(level, "UNKNOWN")

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns DEBUG if invalid."""
        return cls._from_string.get(level_str.lower(), cls.DEBUG)


# Timestamps
MESSAGE_TIMESTAMP_FORMAT = "%d.%m.%Y, %H:%M:%S"
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"

# Chat display
EMPTY_TRANSCRIPT_TEXT = "No messages in the chat yet."
USER_LABEL = "You"
ASSISTANT_LABEL = "Assistant"
STREAMING_LABEL = "streaming..."

# Code rendering
CODE_THEME = "monokai"
INLINE_CODE_STYLE = "bold #f9e2af on #313244"
PLAIN_CODE_LEXER = "text"
