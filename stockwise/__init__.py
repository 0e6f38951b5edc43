"""StockWise portfolio analytics and recommendation engine."""
