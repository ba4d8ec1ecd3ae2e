"""Agentport CLI: command surface for the conversion pipeline."""
