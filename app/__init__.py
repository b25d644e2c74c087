"""Notification delivery service for the purchase-request workflow."""
