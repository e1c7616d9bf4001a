"""Application layer for the onboarding context."""
