"""HTTP surface over the decoder."""
