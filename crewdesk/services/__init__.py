"""Services Layer — orchestration over repositories and the notification dispatcher.

Invariants:
    - Services never import FastAPI; they raise CrewdeskError subclasses
    - Collaborators are constructor parameters (no module-level state)
"""
