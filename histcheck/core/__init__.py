"""
Core checking engine for histcheck.

Contains the operation history model, the model-stepping contract and
stock models, the checker contract and its combinators, and the queue,
set and counter checkers.
"""
