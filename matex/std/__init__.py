from .math import populate_math_environment

__all__ = ['populate_math_environment']
