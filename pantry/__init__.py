"""Pantry. Turns a list of ingredients into a recipe.

The domain lives in `pantry.domain`, the HTTP surface in `pantry.app`.
"""
