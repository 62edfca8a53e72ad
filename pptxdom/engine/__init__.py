"""Unit conversion and color resolution."""
