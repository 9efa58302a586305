"""Entry point for ``python -m slack_vault``."""

from slack_vault.main import run

if __name__ == "__main__":
    run()
