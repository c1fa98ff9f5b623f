"""
vizflow - LLM chart synthesis and dashboard widget updates
"""
__version__ = "0.1.0"
