"""Interview and test-lesson appointment scheduling service."""
