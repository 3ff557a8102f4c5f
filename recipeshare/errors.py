class RecipeShareError(Exception):
    """Base class for errors raised by the recipe core."""


class NotFound(RecipeShareError):
    def __init__(self, recipe_id: str):
        super().__init__(f"Recipe {recipe_id!r} not found")
        self.recipe_id = recipe_id


class InvalidRating(RecipeShareError):
    def __init__(self, value):
        super().__init__(f"Rating must be between 0 and 5, got {value!r}")
        self.value = value


class InvalidComment(RecipeShareError):
    pass


class NotAuthorized(RecipeShareError):
    pass
