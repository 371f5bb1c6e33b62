"""HTTP API of the identity bridge."""
