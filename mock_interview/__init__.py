"""
Mock Interview Coach: AI mock interviews with conversational questions,
voice answers and scored feedback.
"""

__version__ = "1.0.0"
