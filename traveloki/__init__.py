"""Traveloki: curated attractions for Medan."""
