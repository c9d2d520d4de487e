"""Tiered alert-history aggregation for the Cisco Meraki Dashboard API."""
