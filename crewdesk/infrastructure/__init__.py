"""Infrastructure Layer — database, repositories, messaging channels, logging.

Invariants:
    - Implements the core's boundary protocols; core never imports from here
    - All outbound calls carry a timeout and map failures to typed errors
"""
