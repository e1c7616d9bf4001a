"""Onboarding presentation layer."""

from onboarding.presentation.routes import router

__all__ = ["router"]
