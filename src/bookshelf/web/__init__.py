"""HTTP surface for the catalog."""
