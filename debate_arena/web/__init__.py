"""HTTP surface for the debate arena."""
