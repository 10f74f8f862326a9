"""Top-level package for the Dhaka Dispatch batch agent.

Gathers news from two providers, lets a language model pick and rewrite one
article per configured slot, and turns each into a branded, uploaded post.
"""

__all__ = []
