"""Host-facing services of the homee bridge."""
