"""Utility helpers for mdtidy."""
