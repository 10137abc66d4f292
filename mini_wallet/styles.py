"""Textual CSS for the wallet TUI."""

CSS = """
Screen {
    background: $surface;
}

Header, Footer, Tabs {
    background: $panel;
}

Header {
    height: 3;
}

#network-status {
    dock: top;
    height: 1;
    padding: 0 2;
    background: $panel;
    color: $text-muted;
    content-align: right middle;
}

Tab.-active {
    background: #627eea;
    color: $text;
}

#dashboard-tab, #send-tab, #history-tab {
    padding: 1 2;
}

#dashboard-title, #send-title, #history-title, #confirm-title {
    color: #8c9eff;
    text-style: bold underline;
    padding-bottom: 1;
}

#wallet-details {
    height: auto;
    padding: 0 1;
    margin-bottom: 1;
    border: round #627eea;
}

#wallet-balance, #tx-status {
    color: $text;
}

#wallet-balance {
    text-style: bold;
}

#faucet-hint, #fee-estimate {
    color: $warning;
}

#wallet-prompt {
    color: $text-muted;
    padding-bottom: 1;
}

Horizontal {
    height: auto;
    padding-bottom: 1;
}

Button {
    min-width: 16;
    margin-right: 1;
}

Input, DataTable {
    border: tall #627eea 60%;
}

DataTable {
    max-height: 20;
}

#recipient-resolution, #send-error, #contact-error, #import-error {
    height: auto;
    min-height: 1;
}

#tx-status {
    min-height: 2;
    margin-top: 1;
}

.hidden {
    display: none;
}

ModalScreen {
    align: center middle;
}

ModalScreen > * {
    width: 80;
}
"""
