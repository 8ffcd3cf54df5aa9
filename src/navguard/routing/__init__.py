"""Routing — route patterns, parameters, and the named route table.

Patterns are parsed when guards and routes are registered and are
immutable afterwards; matching is a single left-to-right segment walk.
"""
