"""
Oracle Games - Terminal games refereed by a large language model.

This package provides:
- 20 Questions, where the model hides a subject and answers yes/no questions
- A D&D 5e adventure, where the model acts as Dungeon Master
- Save slots that persist every turn
"""

__version__ = "0.1.0"
