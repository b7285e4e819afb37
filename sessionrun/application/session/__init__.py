"""
Session bounded context - Application layer.

Contains the run lifecycle use cases and the navigation controller that
drives a run step by step.
"""
