"""declutter: stealth page fetching and LLM decluttering into clean documents."""

__version__ = "0.1.0"
