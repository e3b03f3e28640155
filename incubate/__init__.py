"""
Incubate
========

Local-first journaling core: entry storage, sentiment analysis, growth
insights and the "Inky" daily reflection conversation.
"""

__version__ = "0.1.0"
