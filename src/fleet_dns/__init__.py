"""Reconcile Route 53 address records with tagged EC2 instances."""

__version__ = "0.1.0"
