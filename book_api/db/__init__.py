"""Database metadata - declarative Base shared by the models and the pool's table bootstrap."""
