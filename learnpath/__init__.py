"""
learnpath
Learning-path e-learning platform backend
"""

__version__ = "1.0.0"
