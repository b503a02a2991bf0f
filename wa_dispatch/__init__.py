"""
wa-dispatch: throttled broadcast of a message to WhatsApp targets
through the Wascript API, with a durable send log.
"""

__version__ = "0.1.0"
