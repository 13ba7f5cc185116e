"""Core logic: configuration, errors, prompt building and chat orchestration."""
