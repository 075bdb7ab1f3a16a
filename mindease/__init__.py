"""
MindEase - A conversational mental wellness companion.

This package provides the conversation engine behind the MindEase chat: a
lexicon sentiment classifier, coping suggestions, article recommendations, a
mood history and durable client-side persistence, exposed over HTTP and a
command-line client.
"""

__version__ = "0.1.0"
