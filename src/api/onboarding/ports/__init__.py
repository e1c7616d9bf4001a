"""Ports for the onboarding context."""
