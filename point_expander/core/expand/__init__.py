"""Expansion of matched call sites into typed sequences.

match -> bind -> expand. The rule table is fixed at import time; each
expansion allocates its own output sequence.
"""
