"""Domain-Oriented Observability for the onboarding application layer."""

from onboarding.application.observability.bootstrap_probe import (
    BootstrapProbe,
    DefaultBootstrapProbe,
)

__all__ = [
    "BootstrapProbe",
    "DefaultBootstrapProbe",
]
