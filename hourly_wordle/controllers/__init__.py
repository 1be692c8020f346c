"""
Controllers Package

HTTP blueprints exposing the hourly word service.
"""

from .word_controller import word_bp

__all__ = ['word_bp']
