"""Identity and session synchronization bridge."""
