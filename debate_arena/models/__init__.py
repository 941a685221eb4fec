"""Inference providers and model catalogue types."""
