"""Crewdesk — worker onboarding and directory service.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
