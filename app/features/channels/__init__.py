"""
Study group channels: membership and messages.
"""
