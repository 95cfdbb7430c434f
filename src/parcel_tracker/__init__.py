"""Parcel Tracker - permissioned lifecycle registry for last-mile package delivery."""

__version__ = "0.1.0"
