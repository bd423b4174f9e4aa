"""Falling block puzzle rules engine and Gymnasium environment."""
