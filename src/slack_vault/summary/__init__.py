"""AI summaries: provider clients, prompts and response parsing."""
