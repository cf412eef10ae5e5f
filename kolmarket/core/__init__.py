"""
Core module - settings and logging shared by every layer.
"""
