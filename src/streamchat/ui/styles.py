"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
"""

APP_CSS = """
Screen {
    layout: vertical;
    background: $background;
}

/* Chat history */
#chat-history {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }
}

#empty-transcript {
    color: $text-muted;
    text-style: italic;
    padding: 1 0;
}

.chat-message {
    height: auto;
    margin: 1 0 0 0;
    padding: 0 1;
    border-left: thick $primary 50%;

    &.assistant-message {
        border-left: thick $secondary 60%;
    }

    &.loading {
        border-left: thick $accent;
    }

    &:hover {
        background: $boost;
    }
}

.message-header {
    text-style: bold;
    color: $text-accent;
}

.message-content {
    height: auto;
}

.message-meta {
    color: $text-muted;
    text-style: dim;
}

/* Debug log */
#debug-panel {
    height: 12;
    border: round $warning 50%;
    border-title-color: $warning;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
}

/* Input bar */
#chat-input-bar {
    height: 10;
    padding: 0 0 0 0;
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: round $primary 40%;

    &:focus {
        border: round $primary;
    }
}

#input-controls {
    width: 26;
    height: 100%;
    padding: 0 1;
}

#input-controls Button {
    width: 100%;
    min-width: 10;
    height: 1;
    border: none;
    margin: 0 0 1 0;
}

#highlight-toggle {
    border: none;
    padding: 0;
}
"""
