"""
Application layer - controllers and sessions that drive the presentation.
"""
