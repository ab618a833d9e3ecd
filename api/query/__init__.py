"""
Raw SQL query endpoint and its execution pipeline.
"""
