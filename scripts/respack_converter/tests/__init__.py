"""Tests for the respack converter."""
