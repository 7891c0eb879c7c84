"""Operator alert and order email adapters.

The Slack adapter pulls in aiohttp; import concrete services from their
modules.
"""
