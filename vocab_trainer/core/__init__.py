"""Pure scheduling algorithms and calendar helpers."""
