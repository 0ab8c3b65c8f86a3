"""Weekly "screen on" time from the macOS power management log."""
