"""
Server-side actions.

Each action is a thin translation of a UI action into document queries. Every
action is wrapped by errors.action(prefix): on failure it raises ActionError
with a fixed prefix plus the original message.
"""
