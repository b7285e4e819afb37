"""Session-run service: drives a learner through a session blueprint."""
