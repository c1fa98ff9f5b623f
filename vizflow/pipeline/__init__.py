"""
Chart synthesis and update pipeline
"""
