"""Text formatting helpers for outbound chat lines."""
