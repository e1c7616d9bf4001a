"""Onboarding bounded context.

Provisions a new tenant (church) and the administrative profile of the
principal who created it, against a backend whose schema becomes visible
asynchronously after setup.
"""
