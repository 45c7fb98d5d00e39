"""Core domain pieces shared across the bot."""
