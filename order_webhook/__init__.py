"""Shopify order webhook receiver that provisions Supabase users and profiles."""

__version__ = "0.1.0"
