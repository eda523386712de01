"""Describes the Pantry domain. Centres around generating a recipe.

- Creating a recipe is a single call to a chat-completion gateway.
- The gateway is asked for JSON and, by default, trusted to follow the shape.
- Saved recipes belong to an owner and are only ever touched through that owner.
"""
