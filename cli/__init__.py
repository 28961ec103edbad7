"""Command line client for the battery health monitor."""
