"""Host interaction: subprocess execution."""
