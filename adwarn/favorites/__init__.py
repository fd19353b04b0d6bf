from adwarn.favorites.repository import FavoriteRepository, validate_icao

__all__ = ["FavoriteRepository", "validate_icao"]
