"""Rich rendering for token status and login notifications.

All interactive output goes to stderr; stdout is reserved for
machine-readable output such as ``status --json`` and ``config show``.
"""
