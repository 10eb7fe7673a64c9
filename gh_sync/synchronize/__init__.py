"""Reconciliation and synchronization of GitHub issues with work items."""
