"""
Catalog core: rating aggregation, book queries, ownership checks,
review lifecycle and profile assembly. Routers stay thin and call into here.
"""
