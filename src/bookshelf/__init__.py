"""Single-user digital book catalog."""
