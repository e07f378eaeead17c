"""
GiftTech Academy - online course platform backend.
"""
