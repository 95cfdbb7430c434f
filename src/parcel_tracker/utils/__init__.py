"""Utilities package for parcel-tracker application."""
