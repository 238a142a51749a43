"""ccheat: 30-day usage heatmap for Claude Code and Codex."""

__version__ = "0.3.0"
