"""Core of connectrelay: path addressing, the field selector, validation
rules, the configuration state machine and key-value persistence."""
