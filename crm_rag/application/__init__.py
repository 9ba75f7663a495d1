"""
Application layer: retrieval orchestration and catalog adapters.
"""
