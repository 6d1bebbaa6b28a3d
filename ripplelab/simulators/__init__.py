"""Drivers that run wave fields frame by frame."""
