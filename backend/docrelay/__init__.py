"""Document translation relay."""
