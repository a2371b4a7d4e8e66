"""CinemaVault: movie catalogue with user reviews and ratings."""
