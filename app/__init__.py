"""
Poker circuit API package
"""
